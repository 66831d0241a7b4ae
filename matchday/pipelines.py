from itemadapter import ItemAdapter
from scrapy.exceptions import DropItem


class MatchPipeline:
    """Match pipeline to clean scraped items and drop repeated matches."""

    def __init__(self):
        self.seen = set()

    def process_item(self, item, spider):
        """Strip whitespace from string fields, then drop matches already seen."""
        adapter = ItemAdapter(item)
        self._strip_values(adapter)

        key = (adapter.get("home_team"), adapter.get("away_team"), adapter.get("kickoff_time"))
        if key in self.seen:
            raise DropItem(f"Duplicate match: {key[0]} x {key[1]} at {key[2] or '?'}")
        self.seen.add(key)
        return item

    def _strip_values(self, adapter: ItemAdapter) -> None:
        """Strip whitespace from string fields in the item."""
        for field in adapter.field_names():
            value = adapter.get(field)
            if isinstance(value, str):
                adapter[field] = value.strip()
