"""Repository package — Database query layer.

Contains the repository classes that handle pure database operations.
Each repository extends BaseRepository for generic CRUD and adds domain-specific queries.
"""
