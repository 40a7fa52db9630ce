"""
Módulo de Productos

Catálogo de productos con precio, tasa de impuesto por defecto y stock.
"""
