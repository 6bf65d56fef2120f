from sqlalchemy import create_engine, Column, String, Integer, JSON
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from loaders.config import DATABASE_URL


Base = declarative_base()

# Result kinds
PACKING = 'packing'
LEFTOVERS = 'leftovers'


class ResultSet(Base):
    """
    Most recent result of one workflow (a flattened packing sheet or a reconciliation).

    There is at most one row per kind: a new upload replaces it wholesale, nothing is
    merged. Rows are stored as JSON lists of plain dicts.
    """
    __tablename__ = 'result_sets'

    kind = Column(String, primary_key=True)
    source = Column(String)            # Uploaded file name(s), for display
    header_idx = Column(Integer)
    roles = Column(JSON)               # Role name -> header label
    rows = Column(JSON)
    descriptions = Column(JSON)        # Filter choices
    packings = Column(JSON)


class FilterSelection(Base):
    """Active description/packing filter for one result kind."""
    __tablename__ = 'filter_selections'

    kind = Column(String, primary_key=True)
    description = Column(String, default="")
    packing = Column(String, default="")


def get_engine(db_url=DATABASE_URL):
    if db_url in ('sqlite://', 'sqlite:///:memory:'):
        # One shared connection, otherwise every session would see its own empty database
        return create_engine(
            db_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    return create_engine(db_url)


def get_session_factory(engine):
    return sessionmaker(bind=engine)


def init_db(engine):
    Base.metadata.create_all(engine)
