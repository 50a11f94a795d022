#storefront/data/models/product.py
from sqlalchemy import Column, Integer, String, Text, Float, Numeric

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    #id comes from the external feed, not autoincremented
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text)
    category = Column(String)
    image = Column(String)

    rate = Column(Float)
    rating_count = Column(Integer)
