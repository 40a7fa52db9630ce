"""
Módulo de Facturación (Invoices)

- Creación, edición y eliminación de facturas con líneas CGST/SGST/IGST
- Integración con inventario (descuento y devolución automática de stock)
- Registro de pago único por factura
- Avance del contador next_invoice_number en cada factura creada

Tablas principales:
- invoices: Facturas de venta
- invoice_items: Líneas de factura
"""
