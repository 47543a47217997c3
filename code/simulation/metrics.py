# simulation/metrics.py
import numpy as np
import pandas as pd
from tabulate import tabulate

from models.message import AntRole


class MessageStats:
    """
    Statistiques de livraison des messages, alimentées par les événements du monde simulé.

    Attributes:
        created: Ids des messages créés avec leur instant de création
        started: Nombre de transferts démarrés
        relayed: Nombre de transferts de messages terminés (hors fourmis retour)
        ant_moves: Nombre de sauts de fourmis retour terminés
        aborted: Nombre de transferts interrompus (perte de contact)
        delivered: Id -> (instant, nombre de sauts, latence) à la première livraison
        returned: Id -> instant de retour de la fourmi à l'origine
    """

    def __init__(self):
        self.created = {}
        self.started = 0
        self.relayed = 0
        self.ant_moves = 0
        self.aborted = 0
        self.delivered = {}
        self.returned = {}
        self.delivery_times = []  # Instants de livraison, dans l'ordre

    #*************** Écouteurs ****************
    def message_created(self, message, t):
        self.created[message.id] = t

    def transfer_started(self, message, sender, receiver, t):
        self.started += 1

    def transfer_aborted(self, message, sender, receiver, t):
        self.aborted += 1

    def message_relayed(self, message, sender, receiver, t):
        # Le retour d'une fourmi n'est pas un relais de données
        if message.ant_role is AntRole.BACKWARD and message.to is not receiver:
            self.ant_moves += 1
            return
        self.relayed += 1
        if message.to is receiver and message.id not in self.delivered:
            latency = t - self.created.get(message.id, message.creation_time)
            self.delivered[message.id] = (t, message.hop_count, latency)
            self.delivery_times.append(t)

    def ant_returned(self, message, node, t):
        self.returned[message.id] = t

    #*************** Métriques ****************
    def delivery_ratio(self) -> float:
        """
        Calcule le ratio de livraison.

        Returns:
            float: Ratio entre 0.0 et 1.0 (0.0 si aucun message créé)
        """
        if not self.created:
            return 0.0
        return len(self.delivered) / len(self.created)

    def overhead_ratio(self) -> float:
        """
        Calcule le ratio d'overhead (transferts par message livré).

        Returns:
            float: (relayés - livrés) / livrés, ou inf si aucune livraison
        """
        if not self.delivered:
            return float('inf')
        return (self.relayed - len(self.delivered)) / len(self.delivered)

    def delivery_delay(self) -> float:
        """
        Calcule le délai moyen de livraison.

        Returns:
            float: Délai moyen, ou inf si aucune livraison
        """
        if not self.delivered:
            return float('inf')
        return float(np.mean([latency for _, _, latency in self.delivered.values()]))

    def mean_hop_count(self) -> float:
        if not self.delivered:
            return 0.0
        return float(np.mean([hops for _, hops, _ in self.delivered.values()]))

    def summary(self) -> dict:
        return {
            'created': len(self.created),
            'started': self.started,
            'relayed': self.relayed,
            'ant_moves': self.ant_moves,
            'aborted': self.aborted,
            'delivered': len(self.delivered),
            'ants_returned': len(self.returned),
            'delivery_prob': self.delivery_ratio(),
            'overhead_ratio': self.overhead_ratio(),
            'latency_avg': self.delivery_delay(),
            'hopcount_avg': self.mean_hop_count()
        }

    def to_dataframe(self) -> pd.DataFrame:
        """
        Détail par message livré.

        Returns:
            pd.DataFrame: colonnes message, created, delivered, hops, latency, returned
        """
        rows = [
            {
                'message': mid,
                'created': self.created.get(mid),
                'delivered': t,
                'hops': hops,
                'latency': latency,
                'returned': self.returned.get(mid)
            }
            for mid, (t, hops, latency) in self.delivered.items()
        ]
        return pd.DataFrame(rows, columns=['message', 'created', 'delivered', 'hops',
                                           'latency', 'returned'])

    def to_table(self) -> str:
        """Rapport formaté (tabulate)."""
        rows = [(name, f"{value:.4f}" if isinstance(value, float) else value)
                for name, value in self.summary().items()]
        return tabulate(rows, headers=['Métrique', 'Valeur'], tablefmt='grid')
