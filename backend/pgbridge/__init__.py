"""pgbridge: Postgres REST backend with a runtime-selectable ORM backend."""

__version__ = "1.0.0"
