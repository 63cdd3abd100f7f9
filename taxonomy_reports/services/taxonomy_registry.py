"""
Taxonomy Registry

Knows which taxonomies are registered for which content type.
Seeded from settings; further taxonomies can be registered at runtime.
"""
from typing import Dict, List, Optional, Set

from taxonomy_reports.config import get_settings
from taxonomy_reports.utils.helpers import parse_csv_setting
from taxonomy_reports.utils.logger import log


class TaxonomyRegistry:
    """Content type -> registered taxonomy names"""

    def __init__(self, registrations: Optional[Dict[str, List[str]]] = None):
        self._taxonomies: Dict[str, List[str]] = {}
        for content_type, names in (registrations or {}).items():
            for name in names:
                self.register(content_type, name)

    @classmethod
    def from_settings(cls) -> "TaxonomyRegistry":
        """Build the registry from product_taxonomies / report_content_type"""
        settings = get_settings()
        return cls({settings.report_content_type: parse_csv_setting(settings.product_taxonomies)})

    def register(self, content_type: str, taxonomy: str) -> None:
        """Register a taxonomy for a content type. Blank names are ignored."""
        taxonomy = (taxonomy or "").strip()
        if not taxonomy:
            log.warning(f"Ignoring blank taxonomy name for content type '{content_type}'")
            return
        names = self._taxonomies.setdefault(content_type, [])
        if taxonomy not in names:
            names.append(taxonomy)

    def list_taxonomy_names(self, content_type: str) -> Set[str]:
        """All taxonomy names registered for content_type (empty if none)"""
        return set(self._taxonomies.get(content_type, []))
