"""
Client d'accès aux données (find / insert / update / delete).

Couche mince au-dessus de SQLAlchemy Core : les services ne manipulent
que des noms de tables et des dictionnaires de colonnes (noms stockés en
minuscules aplaties, ex: quotenumber, grandtotal).

AUCUNE logique métier - uniquement CRUD.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models import Base

logger = logging.getLogger(__name__)


class DataAccessError(Exception):
    """Erreur générique de la couche données"""


class RecordNotFound(DataAccessError):
    """Aucun enregistrement ne correspond au filtre"""

    def __init__(self, table: str, filter: Dict[str, Any]):
        self.table = table
        self.filter = filter
        super().__init__(f"No record in '{table}' matching {filter}")


class DataClient:
    """
    Client données au-dessus d'une Session SQLAlchemy.

    Hors transaction, chaque écriture est validée immédiatement. Dans un
    bloc ``with client.transaction():`` les écritures sont seulement
    envoyées à la base et validées (ou annulées) ensemble à la sortie.
    """

    def __init__(self, session: Session):
        self.session = session
        self._in_transaction = False

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError as e:
            raise DataAccessError(f"Unknown table '{name}'") from e

    def _where(self, table: Table, filter: Optional[Dict[str, Any]]):
        clauses = []
        for column_name, value in (filter or {}).items():
            if column_name not in table.c:
                raise DataAccessError(f"Unknown column '{column_name}' on '{table.name}'")
            column = table.c[column_name]
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            elif value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)
        return clauses

    def _commit(self) -> None:
        if self._in_transaction:
            self.session.flush()
        else:
            self.session.commit()

    @contextmanager
    def transaction(self) -> Iterator["DataClient"]:
        """
        Regroupe plusieurs écritures en une seule validation.

        Toute exception levée dans le bloc annule l'ensemble des écritures
        puis est propagée. Les blocs imbriqués rejoignent le bloc externe.
        """
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            logger.warning("⚠️ Transaction annulée")
            raise
        finally:
            self._in_transaction = False

    def find(
        self,
        table: str,
        filter: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """Retourne toutes les lignes correspondant au filtre (égalité / IN)."""
        tbl = self._table(table)
        stmt = select(tbl).where(*self._where(tbl, filter))
        if order_by:
            column = tbl.c[order_by]
            stmt = stmt.order_by(column.desc() if descending else column.asc())

        try:
            rows = self.session.execute(stmt).all()
        except SQLAlchemyError as e:
            logger.error(f"❌ Lecture {table} impossible: {e}")
            raise DataAccessError(str(e)) from e

        return [dict(row._mapping) for row in rows]

    def find_one(self, table: str, filter: Dict[str, Any]) -> Dict[str, Any]:
        """Retourne la première ligne correspondante ou lève RecordNotFound."""
        rows = self.find(table, filter)
        if not rows:
            raise RecordNotFound(table, filter)
        return rows[0]

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insère une ligne et la relit (valeurs par défaut incluses)."""
        tbl = self._table(table)
        try:
            result = self.session.execute(insert(tbl).values(**record))
            self._commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"❌ Insertion {table} impossible: {e}")
            raise DataAccessError(str(e)) from e

        pk_name = list(tbl.primary_key.columns)[0].name
        pk_value = record.get(pk_name) or result.inserted_primary_key[0]
        return self.find_one(table, {pk_name: pk_value})

    def update(self, table: str, filter: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Met à jour les lignes correspondantes et retourne la première.

        Raises:
            RecordNotFound: si aucune ligne ne correspond
        """
        tbl = self._table(table)
        try:
            result = self.session.execute(update(tbl).where(*self._where(tbl, filter)).values(**patch))
            if result.rowcount == 0:
                raise RecordNotFound(table, filter)
            self._commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"❌ Mise à jour {table} impossible: {e}")
            raise DataAccessError(str(e)) from e

        return self.find_one(table, filter)

    def delete(self, table: str, filter: Dict[str, Any]) -> int:
        """Supprime les lignes correspondantes, retourne le nombre supprimé."""
        tbl = self._table(table)
        try:
            result = self.session.execute(delete(tbl).where(*self._where(tbl, filter)))
            if result.rowcount == 0:
                raise RecordNotFound(table, filter)
            self._commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"❌ Suppression {table} impossible: {e}")
            raise DataAccessError(str(e)) from e

        return result.rowcount
