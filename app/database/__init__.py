"""
Database engine, session factory and transaction scope.
"""
