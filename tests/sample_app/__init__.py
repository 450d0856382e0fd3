"""A small application whose handlers carry documentation declarations."""
