"""Theme Admin – upload, list and download storefront theme packages."""
