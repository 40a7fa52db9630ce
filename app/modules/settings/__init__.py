"""
Módulo de Configuración (Settings)

Almacén clave/valor de la empresa: datos del emisor para la impresión de
facturas y el contador "next_invoice_number", que avanza con cada factura
creada con éxito.
"""
