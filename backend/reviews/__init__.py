"""Reviews domain: models, store adapters, services and the live review list."""
