"""Sample shop used by the generator tests."""
