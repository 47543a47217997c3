#!/usr/bin/env python3
# protocols/pheromone.py
"""
Table de phéromones du routage Cultural ACO.

Principe:
1. Chaque nœud maintient, pour chaque destination connue, une valeur de phéromone
   par voisin : τ(D, v) estime l'intérêt de passer par v pour atteindre D.
2. Lorsqu'une fourmi retour (BACKWARD) arrive depuis le voisin v, seule l'arête
   (local, v) est renforcée et évaporée dans le même calcul :
   τ(D, v) = (1 - ρ) * (τ(D, v) + 1 / L)
   où L est la longueur du chemin aller mesurée à l'arrivée à destination.
3. Les arêtes non empruntées ne s'évaporent jamais : l'évaporation est appliquée
   uniquement à l'arête renforcée, pas globalement.
"""
import logging

import pandas as pd

from models.message import DESTINATION_REF, PATH_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_EVAPORATION_RATE = 0.1


class PheromoneTable:
    """
    Table destination -> (voisin -> phéromone).
    Toute destination enregistrée garde son entrée (éventuellement vide) pendant
    toute la vie du routeur ; un voisin absent a une phéromone de 0.0.
    """

    def __init__(self, evaporation_rate: float = DEFAULT_EVAPORATION_RATE):
        """
        Initialise une table vide.

        Args:
            evaporation_rate (float): taux d'évaporation ρ, dans [0, 1)
        """
        if not 0.0 <= evaporation_rate < 1.0:
            raise ValueError(f"Le taux d'évaporation doit être dans [0, 1), reçu {evaporation_rate}")
        self.evaporation_rate = evaporation_rate
        self.table = {}

    def __len__(self):
        return len(self.table)

    def __contains__(self, destination):
        return destination in self.table

    def create_entry(self, destination):
        """Crée (si besoin) l'entrée de la destination."""
        self.table.setdefault(destination, {})

    def tag_message(self, message):
        """
        Étiquette un message arrivé avec sa destination et la longueur du chemin
        parcouru (instantané du nombre de sauts), puis crée l'entrée de la destination.

        Args:
            message (Message): message arrivé à destination
        """
        message.set_property(DESTINATION_REF, message.to)
        message.set_property(PATH_LENGTH, float(message.hop_count))
        self.create_entry(message.to)

    def get_pheromone(self, neighbor, message) -> float:
        """
        Renvoie la phéromone du voisin pour la destination du message.

        Args:
            neighbor (Node): voisin évalué
            message (Message): message à router

        Returns:
            float: 0.0 si le message n'est pas étiqueté ou si aucune valeur n'est connue
        """
        destination = message.get_property(DESTINATION_REF)
        if destination is None:
            return 0.0
        return self.table.get(destination, {}).get(neighbor, 0.0)

    def get(self, destination, neighbor) -> float:
        return self.table.get(destination, {}).get(neighbor, 0.0)

    def reinforced_value(self, current: float, path_length: float) -> float:
        """(1 - ρ) * (τ + 1 / L)"""
        return (1.0 - self.evaporation_rate) * (current + 1.0 / path_length)

    def update_pheromone(self, local_node, arrived_from, message):
        """
        Renforce l'arête (local_node, arrived_from) pour la destination du message.

        Args:
            local_node (Node): nœud qui reçoit la fourmi retour
            arrived_from (Node): voisin d'où vient la fourmi
            message (Message): fourmi retour étiquetée

        Returns:
            float: nouvelle valeur de phéromone, ou None si rien n'a changé
        """
        path_length = message.get_property(PATH_LENGTH)
        destination = message.get_property(DESTINATION_REF)
        if path_length is None or destination is None or path_length <= 0:
            logger.debug("Message %s non étiqueté, pas de mise à jour de phéromone", message.id)
            return None

        new_value = None
        for con in local_node.get_connections():
            neighbor = con.get_other_node(local_node)
            if neighbor is not arrived_from:
                continue
            current = self.get_pheromone(neighbor, message)
            new_value = self.reinforced_value(current, path_length)
            self.table.setdefault(destination, {})[neighbor] = new_value
            logger.debug("%s: τ(%s, %s) %.4f -> %.4f", local_node, destination, neighbor,
                         current, new_value)
        return new_value

    def destinations(self):
        return list(self.table.keys())

    def entries(self, destination) -> dict:
        return dict(self.table.get(destination, {}))

    def as_dataframe(self) -> pd.DataFrame:
        """
        Exporte la table sous forme de DataFrame (une ligne par couple destination/voisin).

        Returns:
            pd.DataFrame: colonnes destination, neighbor, pheromone
        """
        rows = [
            {'destination': str(dest), 'neighbor': str(neighbor), 'pheromone': value}
            for dest, neighbors in self.table.items()
            for neighbor, value in neighbors.items()
        ]
        return pd.DataFrame(rows, columns=['destination', 'neighbor', 'pheromone'])
