"""
Norgesglass backend: normalizes Narvesen, NGU and NVE upstreams into JSON.
"""

__version__ = "1.0.0"
