"""sigdelta - structural subtraction of API signature trees."""

__version__ = "0.1.0"
