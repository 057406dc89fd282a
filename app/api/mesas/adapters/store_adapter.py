from __future__ import annotations

from typing import Dict, List, Optional, Type

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.mesas.contracts.store_contract import EntityKind, IStoreContract, Record
from app.api.mesas.core.exceptions import StoreConflictError, StoreError
from app.api.mesas.models.model_mesa import MesaModel
from app.api.mesas.models.model_venda_mesa import VendaMesaModel, VendaMesaItemModel
from app.database.db_connection import Base
from app.utils.logger import logger


class SqlAlchemyStoreAdapter(IStoreContract):
    """Store sobre a sessão SQLAlchemy. Cada chamada é uma transação própria (commit/rollback)."""

    MODELS: Dict[EntityKind, Type[Base]] = {
        EntityKind.MESA: MesaModel,
        EntityKind.VENDA: VendaMesaModel,
        EntityKind.VENDA_ITEM: VendaMesaItemModel,
    }

    def __init__(self, db: Session):
        self.db = db

    # ------------ Helpers ------------
    def _model(self, kind: EntityKind):
        try:
            return self.MODELS[EntityKind(kind)]
        except (KeyError, ValueError):
            raise StoreError(f"Tipo de entidade desconhecido: {kind}", kind=str(kind))

    @staticmethod
    def _colunas(model) -> set:
        return {attr.key for attr in sa_inspect(model).column_attrs}

    def _to_record(self, obj) -> Record:
        return {key: getattr(obj, key) for key in self._colunas(type(obj))}

    def _validar_campos(self, kind: EntityKind, model, campos) -> None:
        desconhecidos = set(campos) - self._colunas(model)
        if desconhecidos:
            raise StoreError(
                f"Campos desconhecidos para {kind.value}: {', '.join(sorted(desconhecidos))}",
                kind=kind.value,
            )

    def _falha(self, acao: str, kind: EntityKind, e: Exception, record_id: Optional[int] = None) -> StoreError:
        self.db.rollback()
        if isinstance(e, IntegrityError):
            logger.warning(f"[Store] Conflito ao {acao} {kind.value} id={record_id}: {e.orig}")
            return StoreConflictError(
                f"Conflito de integridade ao {acao} {kind.value}",
                kind=kind.value,
                record_id=record_id,
                causa=str(e.orig),
            )
        logger.error(f"[Store] Erro ao {acao} {kind.value} id={record_id}: {e}")
        return StoreError(f"Erro ao {acao} {kind.value}", kind=kind.value, record_id=record_id, causa=str(e))

    # ------------ Operações ------------
    def insert(self, kind: EntityKind, record: Record) -> Record:
        kind = EntityKind(kind)
        model = self._model(kind)
        self._validar_campos(kind, model, record.keys())
        obj = model(**record)
        self.db.add(obj)
        try:
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._falha("inserir", kind, e) from e
        return self._to_record(obj)

    def update(
        self,
        kind: EntityKind,
        record_id: int,
        patch: Record,
        *,
        expected: Optional[Record] = None,
    ) -> Record:
        kind = EntityKind(kind)
        model = self._model(kind)
        self._validar_campos(kind, model, patch.keys())
        if expected:
            self._validar_campos(kind, model, expected.keys())
        try:
            if expected:
                # relê a linha travada: outra transação pode ter gravado depois da nossa leitura
                obj = (
                    self.db.query(model)
                    .filter(model.id == record_id)
                    .populate_existing()
                    .with_for_update()
                    .first()
                )
            else:
                obj = self.db.get(model, record_id)
            if obj is None:
                raise StoreError(
                    f"Registro {kind.value} id={record_id} não encontrado",
                    kind=kind.value,
                    record_id=record_id,
                )
            divergentes = sorted(k for k, v in (expected or {}).items() if getattr(obj, k) != v)
            if divergentes:
                self.db.rollback()
                logger.warning(f"[Store] {kind.value} id={record_id} mudou antes da gravação: {divergentes}")
                raise StoreConflictError(
                    f"Registro {kind.value} id={record_id} foi alterado por outra operação",
                    kind=kind.value,
                    record_id=record_id,
                    campos=divergentes,
                )
            for key, value in patch.items():
                setattr(obj, key, value)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            raise self._falha("atualizar", kind, e, record_id) from e
        return self._to_record(obj)

    def delete(self, kind: EntityKind, record_id: int) -> None:
        kind = EntityKind(kind)
        model = self._model(kind)
        try:
            obj = self.db.get(model, record_id)
            if obj is None:
                return
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._falha("remover", kind, e, record_id) from e

    def query(
        self,
        kind: EntityKind,
        filtro: Optional[Record] = None,
        *,
        for_update: bool = False,
    ) -> List[Record]:
        kind = EntityKind(kind)
        model = self._model(kind)
        filtro = filtro or {}
        self._validar_campos(kind, model, filtro.keys())
        try:
            q = self.db.query(model)
            for key, value in filtro.items():
                q = q.filter(getattr(model, key) == value)
            if for_update:
                q = q.with_for_update()
            return [self._to_record(obj) for obj in q.order_by(model.id).all()]
        except SQLAlchemyError as e:
            raise self._falha("consultar", kind, e) from e
