from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(session: AsyncSession, model):
    """
    INSERT construct of the session's dialect, supporting ON CONFLICT clauses

    :param session: session whose bind decides the dialect
    :param model: mapped class or table to insert into
    :return: dialect-specific Insert with on_conflict_do_update / on_conflict_do_nothing
    """
    dialect_name = session.get_bind().dialect.name
    try:
        insert = _DIALECT_INSERTS[dialect_name]
    except KeyError:
        raise RuntimeError(f"Atomic upsert is not supported for dialect '{dialect_name}'")
    return insert(model)
