"""Static column schema for the weekly projection export."""

from __future__ import annotations

from models import FieldDescriptor, TransformKind

YEAR_FIELD = "Anio"
WEEK_FIELD = "Semana"
ORCHARD_FIELD = "Codigo_Huerto"
GROUPING_FIELD = "Nombre_Productor"

RECEPTION_TOTAL_FIELD = "reception_total"
RECEPTION_ACCEPTED_FIELD = "reception_accepted"

_PASS = TransformKind.PASSTHROUGH
_TEXT = TransformKind.TEXT_NORMALIZE
_DECIMAL = TransformKind.DECIMAL

# Order matters: it is the column order of every normalized record and of the report.
PROJECTION_SCHEMA: tuple[FieldDescriptor, ...] = (
    FieldDescriptor("Temporada", True, _PASS),
    FieldDescriptor("Fruta", True, _TEXT),
    FieldDescriptor("Centro_acopio", True, _TEXT),
    FieldDescriptor("Estado", True, _TEXT),
    FieldDescriptor("PR_Productor", True, _TEXT),
    FieldDescriptor(GROUPING_FIELD, True, _TEXT),
    FieldDescriptor("Nombre_Huerto", True, _TEXT),
    FieldDescriptor(ORCHARD_FIELD, True, _DECIMAL),
    FieldDescriptor("Hectareas", True, _DECIMAL),
    FieldDescriptor("Mes", True, TransformKind.MONTH_YEAR_TOKEN, {"year_field": YEAR_FIELD}),
    FieldDescriptor(WEEK_FIELD, True, _PASS),
    FieldDescriptor("Cajas_proyectadas", True, _DECIMAL),
    FieldDescriptor("Variedad", True, _TEXT),
    FieldDescriptor("Fecha_Update", True, TransformKind.DATE),
)
