"""DAO implementations satisfying :mod:`entity_controller.core.protocols`."""

from entity_controller.dao.sqlalchemy_dao import SQLAlchemyDAO

__all__ = ["SQLAlchemyDAO"]
