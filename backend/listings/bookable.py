"""
Booking capability over the different listing kinds.

The booking core only talks to the ``Bookable`` protocol: it needs the
listing id, whether it is active, the owning vendor and a way to resolve a
requested room/option into a priced snapshot. Each listing kind provides its
own adapter so kind-specific wording lives here rather than in the core.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

from .models import Listing, ListingOption


@dataclass(frozen=True)
class LineItemRef:
    """A client reference to a room/option: by id, by name, or both."""

    option_id: Optional[int] = None
    name: str = ""

    def describe(self) -> str:
        if self.name:
            return self.name
        if self.option_id is not None:
            return str(self.option_id)
        return "(unnamed)"


@dataclass(frozen=True)
class PricedLineItem:
    """Pricing snapshot of a listing option taken at booking time."""

    option_id: int
    name: str
    price: Decimal
    taxes: Decimal


class Bookable(Protocol):
    id: int
    is_active: bool
    vendor_id: int
    kind: str
    name: str
    line_item_label: str

    def resolve_line_item(self, ref: LineItemRef) -> Optional[PricedLineItem]: ...


class ListingBookable:
    """Base adapter exposing a ``Listing`` row through the ``Bookable`` protocol."""

    line_item_label = "option"

    def __init__(self, listing: Listing):
        self.listing = listing

    @property
    def id(self) -> int:
        return self.listing.pk

    @property
    def is_active(self) -> bool:
        return bool(self.listing.is_active)

    @property
    def vendor_id(self) -> int:
        return self.listing.vendor_id

    @property
    def kind(self) -> str:
        return self.listing.kind

    @property
    def name(self) -> str:
        return self.listing.name

    def _options(self) -> list[ListingOption]:
        # Served from the prefetch cache when the listing was loaded via load_bookable.
        return list(self.listing.options.all())

    @staticmethod
    def _snapshot(option: ListingOption) -> PricedLineItem:
        return PricedLineItem(
            option_id=option.pk,
            name=option.name,
            price=option.price,
            taxes=option.taxes or Decimal("0"),
        )

    def resolve_line_item(self, ref: LineItemRef) -> Optional[PricedLineItem]:
        """Match by option id first, then by exact name."""
        options = self._options()
        if ref.option_id is not None:
            for option in options:
                if option.pk == ref.option_id:
                    return self._snapshot(option)
        if ref.name:
            for option in options:
                if option.name == ref.name:
                    return self._snapshot(option)
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} listing={self.id}>"


class StayBookable(ListingBookable):
    line_item_label = "room"


class TourBookable(ListingBookable):
    line_item_label = "option"


class AdventureBookable(ListingBookable):
    line_item_label = "option"


class VehicleRentalBookable(ListingBookable):
    line_item_label = "vehicle"


BOOKABLE_KINDS: dict[str, type[ListingBookable]] = {
    Listing.Kind.STAY: StayBookable,
    Listing.Kind.TOUR: TourBookable,
    Listing.Kind.ADVENTURE: AdventureBookable,
    Listing.Kind.VEHICLE_RENTAL: VehicleRentalBookable,
}


def get_bookable(listing: Listing) -> ListingBookable:
    """Wrap a listing in the adapter for its kind."""
    try:
        adapter = BOOKABLE_KINDS[listing.kind]
    except KeyError:
        raise ValueError(f"Unsupported listing kind: {listing.kind!r}") from None
    return adapter(listing)


def load_bookable(listing_id: int) -> Optional[ListingBookable]:
    """
    Read one active listing (with its options) from the listing store.

    Returns None when the listing does not exist or is inactive.
    """
    listing = (
        Listing.objects.filter(pk=listing_id, is_active=True)
        .select_related("vendor")
        .prefetch_related("options")
        .first()
    )
    if listing is None:
        return None
    return get_bookable(listing)
