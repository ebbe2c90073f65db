from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from app.promohub.db.models import Promotion
from app.promohub.repos.promotions import PromotionStore


@dataclass(frozen=True)
class CarouselSelection:
    ids: list[str]
    items: list[Promotion]


@dataclass(frozen=True)
class CarouselCheck:
    ids: list[str]
    duplicates: list[str]
    missing: list[str]

    @property
    def valid(self) -> bool:
        return not self.duplicates and not self.missing


def dedupe(ids: Iterable[str]) -> tuple[list[str], list[str]]:
    seen: set[str] = set()
    unique: list[str] = []
    duplicates: list[str] = []
    for promotion_id in ids:
        if promotion_id in seen:
            if promotion_id not in duplicates:
                duplicates.append(promotion_id)
            continue
        seen.add(promotion_id)
        unique.append(promotion_id)
    return unique, duplicates


class CarouselSelector:
    """Curated display order of promotion ids, held on the store it reads from."""

    def __init__(self, store: PromotionStore):
        self.store = store

    def normalize(self, ids: Iterable[str]) -> CarouselCheck:
        unique, duplicates = dedupe(str(promotion_id) for promotion_id in ids)
        kept = [promotion_id for promotion_id in unique if self.store.exists(promotion_id)]
        missing = [promotion_id for promotion_id in unique if promotion_id not in kept]
        return CarouselCheck(ids=kept, duplicates=duplicates, missing=missing)

    def set_carousel(self, ids: Iterable[str]) -> CarouselSelection:
        normalized = self.normalize(ids).ids
        self.store.carousel_ids[:] = normalized
        return CarouselSelection(ids=list(normalized), items=self.get_carousel_promotions())

    def get_carousel_ids(self) -> list[str]:
        return list(self.store.carousel_ids)

    def get_carousel_promotions(self) -> list[Promotion]:
        by_id = {promotion.id: promotion for promotion in self.store.snapshot()}
        return [by_id[promotion_id] for promotion_id in self.store.carousel_ids if promotion_id in by_id]
