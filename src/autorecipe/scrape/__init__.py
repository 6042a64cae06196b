"""配方模型与执行"""

from .extract import scrape_document
from .fieldname import compute_field_hash, generate_field_name, parse_field_name
from .models import ConfigID, ElementLocation, Field, Paginator, Recipe, Scraper, records_to_string
from .page import scrape_page

__all__ = [
    "ConfigID",
    "ElementLocation",
    "Field",
    "Paginator",
    "Recipe",
    "Scraper",
    "records_to_string",
    "scrape_document",
    "scrape_page",
    "compute_field_hash",
    "generate_field_name",
    "parse_field_name",
]
