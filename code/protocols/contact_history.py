#!/usr/bin/env python3
# protocols/contact_history.py
"""
Historique des contacts d'un nœud et compteur de betweenness local.

L'historique enregistre, pour chaque voisin, la suite des durées de contact
(début, fin). Il alimente l'estimateur de centralité globale.
"""
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Duration:
    """Période de contact terminée avec un voisin"""
    start: float
    end: float

    @property
    def length(self) -> float:
        return self.end - self.start


class ContactHistory:
    """
    Historique des contacts : voisin -> liste de Duration (ajout seulement).
    Les contacts en cours sont suivis dans start_timestamps jusqu'à leur fermeture.
    """

    def __init__(self):
        self.start_timestamps = {}
        self.history = {}

    def __len__(self):
        return sum(len(durations) for durations in self.history.values())

    def on_contact_up(self, neighbor, now: float):
        """
        Enregistre le début d'un contact.

        Args:
            neighbor (Node): voisin rencontré
            now (float): instant courant
        """
        self.start_timestamps[neighbor] = now

    def on_contact_down(self, neighbor, now: float):
        """
        Clôt un contact et enregistre sa durée si elle est strictement positive.
        Une fermeture sans ouverture connue est ignorée.

        Args:
            neighbor (Node): voisin quitté
            now (float): instant courant

        Returns:
            Duration: la durée enregistrée, ou None
        """
        if neighbor not in self.start_timestamps:
            logger.warning("Fin de contact avec %s sans début enregistré, ignorée", neighbor)
            return None
        start = self.start_timestamps.pop(neighbor)
        if start is None or now is None:
            # Contact hors horloge simulée : pas de durée mesurable
            return None
        if now - start <= 0:
            return None
        duration = Duration(start, now)
        self.history.setdefault(neighbor, []).append(duration)
        return duration

    def is_in_contact(self, neighbor) -> bool:
        return neighbor in self.start_timestamps

    def durations(self, neighbor):
        return list(self.history.get(neighbor, []))

    def neighbors(self):
        return list(self.history.keys())

    def as_mapping(self) -> dict:
        return {neighbor: list(durations) for neighbor, durations in self.history.items()}

    def total_contact_time(self, neighbor=None) -> float:
        """
        Temps de contact cumulé (avec un voisin, ou avec tous).

        Args:
            neighbor (Node, optional): voisin ciblé. Par défaut None (tous).
        """
        if neighbor is not None:
            return sum(d.length for d in self.history.get(neighbor, []))
        return sum(d.length for durations in self.history.values() for d in durations)


class BetweennessCounter:
    """
    Compteur de passages de fourmis retour : nœud -> nombre de visites.
    La valeur normalisée divise par le maximum observé.
    """

    def __init__(self):
        self.counts = {}

    def __len__(self):
        return len(self.counts)

    def increment(self, node):
        self.counts[node] = self.counts.get(node, 0.0) + 1.0
        return self.counts[node]

    def get(self, node) -> float:
        return self.counts.get(node, 0.0)

    def observe(self, node, count: float):
        """
        Mémorise le compteur annoncé par un pair (jamais à la baisse).

        Args:
            node (Node): le pair
            count (float): son propre compteur
        """
        if count > self.counts.get(node, 0.0):
            self.counts[node] = count

    def normalized(self, node) -> float:
        """
        Betweenness normalisée dans [0, 1].

        Returns:
            float: 0.0 sans échantillon ou si le maximum est nul
        """
        if not self.counts:
            return 0.0
        max_count = max(self.counts.values())
        if max_count <= 0:
            return 0.0
        return self.counts.get(node, 0.0) / max_count
