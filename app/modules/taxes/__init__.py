"""
Módulo de Impuestos

Cálculo de totales de factura con componentes CGST, SGST e IGST.
"""
