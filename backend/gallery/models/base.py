# gallery/models/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

from gallery.core.config import DataBaseConfig

metadata = MetaData(naming_convention=DataBaseConfig.model_fields["naming_convention"].default)

Base = declarative_base(metadata=metadata)
