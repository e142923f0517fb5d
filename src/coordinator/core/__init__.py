"""
Core primitives: errors, hashing, settings, logging and the relational store.

Modules
-------
errors          Typed error hierarchy with stable codes
hashing         Multihash content digests
logging         structlog configuration
settings        pydantic-settings configuration (env + YAML)
dialect         SQL fragments per backend
adapters        SQLite / PostgreSQL adapters over a SQLAlchemy QueuePool, get_adapter()
schema          profiles / tasks DDL
repository      BaseRepository
profiles        ProfileRegistry
tasks           TaskStore
store           Store (adapter + registries lifecycle)
types           ProfileId, TaskId, Profile, Task
"""
