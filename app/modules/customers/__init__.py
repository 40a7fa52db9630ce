"""
Módulo de Clientes

Gestión de los clientes a los que se emiten facturas:
- CRUD completo con nombre único
- Búsqueda por nombre, email o teléfono
- GSTIN normalizado y validado
- Eliminación bloqueada mientras existan facturas del cliente
"""
