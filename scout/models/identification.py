"""
Identification model - what the vision backend says the item is.
"""
from pydantic import ConfigDict

from .base import CamelModel


class ItemIdentification(CamelModel):
    """Item description and category, immutable once fed to the pipeline."""
    model_config = ConfigDict(frozen=True)

    description: str
    category: str

    @property
    def is_complete(self) -> bool:
        """Both description and category carry text."""
        return bool(self.description.strip()) and bool(self.category.strip())
