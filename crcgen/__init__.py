from .table import WIDTHS, Parameters, Table, Predefined, Catalog, generate


__all__ = ["WIDTHS", "Parameters", "Table", "Predefined", "Catalog", "generate"]
