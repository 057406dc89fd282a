from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, constr, model_validator

from app.api.mesas.core.maquina_estados import EventoMesa
from app.api.mesas.models.model_mesa import StatusMesa, STATUS_DESCRICAO
from app.config.settings import CAPACIDADE_PADRAO_MESA


class MesaIn(BaseModel):
    """Schema para criação de mesa"""
    numero: int = Field(..., description="Número da mesa (único entre mesas ativas)", ge=1)
    nome: Optional[constr(max_length=100)] = None
    capacidade: int = Field(default=CAPACIDADE_PADRAO_MESA, ge=1)
    localizacao: Optional[constr(max_length=100)] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def normalizar_strings_vazias(cls, data):
        if isinstance(data, dict):
            for campo in ("nome", "localizacao"):
                valor = data.get(campo)
                if isinstance(valor, str) and not valor.strip():
                    data[campo] = None
        return data


class MesaUpdate(BaseModel):
    """Schema para atualização de mesa; status só muda por transição."""
    numero: Optional[int] = Field(None, ge=1)
    nome: Optional[constr(min_length=1, max_length=100)] = None
    capacidade: Optional[int] = Field(None, ge=1)
    localizacao: Optional[constr(max_length=100)] = None

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class MesaOut(BaseModel):
    """Schema para retorno de mesa"""
    id: int
    numero: int
    nome: str
    capacidade: int
    status: StatusMesa
    status_descricao: str = ""
    localizacao: Optional[str] = None
    ativa: bool
    venda_atual_id: Optional[int] = None
    label: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def preencher_descricoes(self):
        self.status_descricao = STATUS_DESCRICAO.get(self.status, "Desconhecido")
        self.label = f"Mesa {self.numero}"
        return self


class MesaTransicaoRequest(BaseModel):
    evento: EventoMesa
    venda_id: Optional[int] = Field(None, description="Obrigatório para o evento open_with_sale", gt=0)


class MesaStatsOut(BaseModel):
    """Schema para estatísticas de mesas (somente ativas nos contadores de status)"""
    total: int
    livres: int
    ocupadas: int
    aguardando_conta: int
    em_limpeza: int
    ativas: int
    inativas: int


class ProximoNumeroOut(BaseModel):
    numero: int
    nome_sugerido: str


class EventosPermitidosOut(BaseModel):
    mesa_id: int
    status: StatusMesa
    eventos: List[EventoMesa]
