"""Service layer. Functions raise healthwallet.errors types; blueprints never translate them."""
