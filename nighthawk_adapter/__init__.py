"""
Nighthawk Adapter - capability registration agent

Advertises Nighthawk component definitions to Meshery Server and keeps the
advertisement current.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- Shared state travels in an explicit, immutable AgentContext

Modules:
- capability: Component definitions, availability table, local store
- generation: Resolving and building component definitions
- registry: Publishing to Meshery Server
- registration: Bootstrap registration and the periodic reconciliation loop
- api: HTTP response models
"""

__version__ = "1.0.0"
