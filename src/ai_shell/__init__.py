"""
ai-shell - Assistant shell propulsé par Mistral.

Transforme une demande en langage naturel en commande shell,
l'explique, la révise, et propose un mode chat.
"""

__version__ = "1.0.0"
