import enum


class FavoriteType(str, enum.Enum):
    PRODUCT = "product"
    ACTIVITY = "activity"

    @property
    def group(self):
        """Key used for this type in the favorite ids payload."""
        return "products" if self is FavoriteType.PRODUCT else "activities"
