"""Order domain constants."""

ORDER_ASSET_TYPE = "order"

# Keys the distributer must supply through the transient map.
REQUIRED_TRANSIENT_FIELDS = ("type", "quantity", "price", "distributerName")
