"""Identity resolution: bearer credential -> active User.

Exactly one strategy is active per deployment (external provider or local
signed token), chosen at startup by :class:`IdentityStrategyFactory`.
"""
