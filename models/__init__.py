from .database import (
    Base, ResultSet, FilterSelection, PACKING, LEFTOVERS,
    get_engine, get_session_factory, init_db,
)
