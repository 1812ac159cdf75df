"""Typed views of Nubarium OCR responses.

The service is loose about value types: amounts such as ``totalPagar`` come
back either as a string or as an object, depending on the document. Those
fields are kept as StringOrObject so the original JSON shape survives a
decode/encode cycle.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping


@dataclass(frozen=True)
class StringOrObject:
    """A JSON value that may be a string or an object, stored as raw JSON text."""

    raw: str | None = None

    @classmethod
    def from_value(cls, value: Any) -> "StringOrObject":
        return cls(raw=json.dumps(value, ensure_ascii=False))

    def is_string(self) -> bool:
        return self.raw is not None and len(self.raw) >= 2 and self.raw[0] == '"' and self.raw[-1] == '"'

    def __str__(self) -> str:
        if self.raw is None:
            return ""
        value = json.loads(self.raw)
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    def to_value(self) -> Any:
        """Return the decoded JSON value (None when the field was absent)."""
        if self.raw is None:
            return None
        return json.loads(self.raw)

    def unmarshal_object(self) -> Any:
        if self.is_string():
            raise TypeError("value is string, not object")
        return self.to_value()


def _str_field(d: Mapping[str, Any], key: str) -> str:
    v = d.get(key)
    if v is None:
        return ""
    if not isinstance(v, str):
        raise TypeError(f"field {key!r}: expected string, got {type(v).__name__}")
    return v


def _sor_field(d: Mapping[str, Any], key: str) -> StringOrObject:
    if key not in d:
        return StringOrObject()
    return StringOrObject.from_value(d[key])


@dataclass(frozen=True)
class ComprobanteDomicilioValidaciones:
    codigo_numerico: str = ""
    fecha: str = ""
    numero_servicio: str = ""
    tarifa: str = ""
    total_pagar: StringOrObject = field(default_factory=StringOrObject)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> "ComprobanteDomicilioValidaciones":
        if d is None:
            return cls()
        if not isinstance(d, Mapping):
            raise TypeError(f"validaciones: expected object, got {type(d).__name__}")
        return cls(
            codigo_numerico=_str_field(d, "codigoNumerico"),
            fecha=_str_field(d, "fecha"),
            numero_servicio=_str_field(d, "numeroServicio"),
            tarifa=_str_field(d, "tarifa"),
            total_pagar=_sor_field(d, "totalPagar"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "codigoNumerico": self.codigo_numerico,
            "fecha": self.fecha,
            "numeroServicio": self.numero_servicio,
            "tarifa": self.tarifa,
            "totalPagar": self.total_pagar.to_value(),
        }


# (attribute, wire key) for the plain string fields of the response
_RESPONSE_STR_FIELDS: tuple[tuple[str, str], ...] = (
    ("qr", "QR"),
    ("calle", "calle"),
    ("ciudad", "ciudad"),
    ("clave_mensaje", "claveMensaje"),
    ("codigo_barras", "codigoBarras"),
    ("codigo_numerico", "codigoNumerico"),
    ("codigo_validacion", "codigoValidacion"),
    ("colonia", "colonia"),
    ("cp", "cp"),
    ("fecha", "fecha"),
    ("fecha_limite_pago", "fechaLimitePago"),
    ("multiplicador", "multiplicador"),
    ("nombre", "nombre"),
    ("numero_medidor", "numeroMedidor"),
    ("numero_servicio", "numeroServicio"),
    ("periodo_facturado", "periodoFacturado"),
    ("referencia", "referencia"),
    ("rmu2", "rmu2"),
    ("status", "status"),
    ("tarifa", "tarifa"),
    ("tipo", "tipo"),
)


@dataclass
class ComprobanteDomicilioResponse:
    """Response of the comprobante_domicilio (proof of address) endpoint.

    parsed_date/date_error are filled by the client from ``fecha``; they are
    not part of the service payload.
    """

    qr: str = ""
    calle: str = ""
    ciudad: str = ""
    clave_mensaje: str = ""
    codigo_barras: str = ""
    codigo_numerico: str = ""
    codigo_validacion: str = ""
    colonia: str = ""
    cp: str = ""
    fecha: str = ""
    fecha_limite_pago: str = ""
    multiplicador: str = ""
    nombre: str = ""
    numero_medidor: str = ""
    numero_servicio: str = ""
    periodo_facturado: str = ""
    referencia: str = ""
    rmu2: str = ""
    status: str = ""
    tarifa: str = ""
    tipo: str = ""
    total_pagar: StringOrObject = field(default_factory=StringOrObject)
    total_pagar2: StringOrObject = field(default_factory=StringOrObject)
    validaciones: ComprobanteDomicilioValidaciones = field(default_factory=ComprobanteDomicilioValidaciones)

    parsed_date: datetime | None = None
    date_error: Exception | None = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ComprobanteDomicilioResponse":
        if not isinstance(d, Mapping):
            raise TypeError(f"expected JSON object, got {type(d).__name__}")
        kwargs: dict[str, Any] = {attr: _str_field(d, key) for attr, key in _RESPONSE_STR_FIELDS}
        kwargs["total_pagar"] = _sor_field(d, "totalPagar")
        kwargs["total_pagar2"] = _sor_field(d, "totalPagar2")
        kwargs["validaciones"] = ComprobanteDomicilioValidaciones.from_dict(d.get("validaciones"))
        return cls(**kwargs)

    @classmethod
    def from_json(cls, text: str) -> "ComprobanteDomicilioResponse":
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {key: getattr(self, attr) for attr, key in _RESPONSE_STR_FIELDS}
        out["totalPagar"] = self.total_pagar.to_value()
        out["totalPagar2"] = self.total_pagar2.to_value()
        out["validaciones"] = self.validaciones.to_dict()
        out["parsedDate"] = self.parsed_date.isoformat() if self.parsed_date else None
        out["dateError"] = str(self.date_error) if self.date_error else None
        return out
