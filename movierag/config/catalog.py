"""
MovieRAG - Built-in Movie Catalog
===================================
The knowledge base embedded at startup when no ``CATALOG_PATH`` is set.
Keys are unique and stable; they become the collection keys.
"""

MOVIE_CATALOG: list[dict[str, int | str]] = [
    {"key": 1, "title": "The Matrix", "description": "A computer hacker learns from mysterious rebels about the true nature of his reality and his role in the war against its controllers."},
    {"key": 2, "title": "Inception", "description": "A thief who steals corporate secrets through the use of dream-sharing technology is given the inverse task of planting an idea into the mind of a C.E.O."},
    {"key": 3, "title": "Interstellar", "description": "A team of explorers travel through a wormhole in space in an attempt to ensure humanity's survival."},
]
