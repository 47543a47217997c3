#!/usr/bin/env python3
# protocols/utility.py
"""
Utilité "culturelle" d'un nœud :
    U(n) = β * (betweenness_normalisée(n) + centralité_globale(historique(n)))
Recalculée à chaque appel, jamais mise en cache : la betweenness et l'historique
évoluent entre deux décisions.
"""
from protocols.centrality import Centrality

DEFAULT_BETA = 0.4


class UtilityEngine:
    """
    Combine la betweenness locale normalisée et la centralité globale.
    """

    def __init__(self, centrality: Centrality, beta: float = DEFAULT_BETA):
        """
        Args:
            centrality (Centrality): estimateur de centralité globale
            beta (float): poids de l'utilité
        """
        self.centrality = centrality
        self.beta = beta

    def replicate(self):
        return UtilityEngine(self.centrality.replicate(), self.beta)

    def utility(self, node, betweenness, history, now=None) -> float:
        """
        Calcule l'utilité d'un nœud.

        Args:
            node (Node): nœud évalué
            betweenness (BetweennessCounter): compteurs de passages connus
            history (ContactHistory): historique des contacts du nœud
            now (float, optional): instant courant

        Returns:
            float: utilité (>= 0)
        """
        return self.beta * (betweenness.normalized(node)
                            + self.centrality.global_centrality(history, now))
