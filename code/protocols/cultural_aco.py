#!/usr/bin/env python3
# protocols/cultural_aco.py
"""
Implémentation du routeur Cultural ACO pour les réseaux tolérants aux délais (DTN).

Principe:
1. Chaque message est une fourmi. Tant qu'il cherche sa destination, il est
   une fourmi aller (FORWARD). À sa première arrivée à destination il devient
   une fourmi retour (BACKWARD), définitivement.
2. La fourmi retour est rendue nœud par nœud le long du chemin aller. À chaque
   arrivée, le nœud incrémente son compteur de betweenness et renforce la
   phéromone de l'arête par laquelle elle est arrivée :
   τ(D, v) = (1 - ρ) * (τ(D, v) + 1 / L)
3. Chaque nœud calcule une utilité "culturelle" :
   U(n) = β * (betweenness_normalisée(n) + centralité_globale(n))
4. Politique de transfert: pour chaque message aller, le meilleur voisin est
   celui qui maximise score(v) = α * τ(D, v) + β * U(v) sur tous les contacts
   actifs. Le message lui est proposé si et seulement si U(v) > U(local).
   Les candidats sont triés par utilité du pair décroissante.

Référence: routage ACO pour DTN combinant phéromones et centralité
(utilité culturelle), dans l'esprit de PRoPHET et BubbleRap.
"""
import logging
import random
from dataclasses import dataclass

from config import CONFIG, ROUTER_NS
from models.message import ANT_ROLE, DESTINATION_REF, RETURN_PATH, AntRole
from protocols.base import DTNRouter, QUEUE_MODES
from protocols.centrality import CENTRALITY_ALGORITHMS, create_centrality
from protocols.contact_history import BetweennessCounter, ContactHistory
from protocols.errors import ContactLostError
from protocols.pheromone import DEFAULT_EVAPORATION_RATE, PheromoneTable
from protocols.utility import DEFAULT_BETA, UtilityEngine

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.6


@dataclass(frozen=True)
class CulturalACOSettings:
    """Configuration immuable partagée par tous les routeurs répliqués"""
    centrality_alg: str = 'SWindowCentrality'
    evaporation_rate: float = DEFAULT_EVAPORATION_RATE
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA
    queue_mode: str = 'fifo'
    centrality_params: tuple = ()  # Couples (clé, valeur) triés, pour rester hachable

    def __post_init__(self):
        params = self.centrality_params
        if hasattr(params, 'items'):
            params = params.items()
        object.__setattr__(self, 'centrality_params', tuple(sorted(params)))
        if self.centrality_alg not in CENTRALITY_ALGORITHMS:
            raise ValueError(f"Algorithme de centralité inconnu: {self.centrality_alg}")
        if not 0.0 <= self.evaporation_rate < 1.0:
            raise ValueError(f"evaporationRate doit être dans [0, 1), reçu {self.evaporation_rate}")
        if self.alpha < 0 or self.beta < 0:
            raise ValueError(f"Les poids doivent être positifs (alpha={self.alpha}, beta={self.beta})")
        if self.queue_mode not in QUEUE_MODES:
            raise ValueError(f"Mode de file inconnu: {self.queue_mode}")

    def params_dict(self) -> dict:
        """Paramètres de l'algorithme de centralité (copie modifiable)."""
        return dict(self.centrality_params)

    @classmethod
    def from_config(cls, config: dict = None, namespace: str = ROUTER_NS):
        """
        Construit la configuration à partir du dictionnaire CONFIG.

        Args:
            config (dict, optional): configuration complète. Par défaut CONFIG.
            namespace (str): espace de noms du routeur

        Returns:
            CulturalACOSettings: configuration validée
        """
        config = CONFIG if config is None else config
        ns = config.get(namespace, {})
        alg = ns.get('centralityAlg', cls.centrality_alg)
        return cls(
            centrality_alg=alg,
            evaporation_rate=float(ns.get('evaporationRate', DEFAULT_EVAPORATION_RATE)),
            alpha=float(ns.get('alpha', DEFAULT_ALPHA)),
            beta=float(ns.get('beta', DEFAULT_BETA)),
            queue_mode=ns.get('queueMode', 'fifo'),
            centrality_params=config.get(alg, {})
        )


class CulturalACORouter(DTNRouter):
    """
    Routeur Cultural ACO : phéromones apprises par fourmis retour et utilité
    fondée sur la betweenness locale et la centralité des contacts.

    L'état d'apprentissage (phéromones, historique, betweenness) est propre à
    chaque nœud et n'est jamais transféré.
    """

    def __init__(self, settings: CulturalACOSettings = None, centrality=None, rng=None):
        """
        Initialise le routeur.

        Args:
            settings (CulturalACOSettings): configuration (partagée par référence)
            centrality (Centrality, optional): estimateur à utiliser. Par défaut
                créé à partir de settings.centrality_alg.
            rng (random.Random, optional): générateur pour le mode de file 'random'
        """
        settings = settings or CulturalACOSettings()
        super().__init__(settings.queue_mode, rng)
        self.settings = settings
        self.centrality = centrality or create_centrality(settings.centrality_alg,
                                                          settings.params_dict())
        self.utility_engine = UtilityEngine(self.centrality, settings.beta)
        self.pheromone_table = PheromoneTable(settings.evaporation_rate)
        self.contact_history = ContactHistory()
        self.betweenness = BetweennessCounter()
        self.processed_ants = set()  # Ids des fourmis retour déjà traitées ici

    @property
    def alpha(self) -> float:
        return self.settings.alpha

    @property
    def beta(self) -> float:
        return self.settings.beta

    def replicate(self):
        """
        Crée un routeur pour un nouveau nœud : même configuration, centralité
        répliquée, état d'apprentissage vierge.
        """
        return CulturalACORouter(self.settings, self.centrality.replicate(),
                                 random.Random(self.rng.random()))

    def _now(self):
        return self.world.time if self.world is not None else None

    #*************** Valeurs exposées aux pairs ****************
    def get_utility(self) -> float:
        """Utilité du nœud local, recalculée à chaque appel."""
        return self.utility_engine.utility(self.host, self.betweenness,
                                           self.contact_history, self._now())

    def get_utility_for(self, destination) -> float:
        """
        Utilité du nœud pour une destination. La centralité étant globale,
        la valeur ne dépend pas de la destination.
        """
        return self.get_utility()

    def get_own_betweenness(self) -> float:
        return self.betweenness.get(self.host)

    def get_pheromone_for(self, neighbor, message) -> float:
        return self.pheromone_table.get_pheromone(neighbor, message)

    #*************** Cycle de vie des contacts ****************
    def changed_connection(self, con):
        """
        Met à jour l'historique des contacts à l'ouverture et à la fermeture.
        À l'ouverture, le compteur de betweenness annoncé par le pair est mémorisé.
        """
        other = con.get_other_node(self.host)
        now = self._now()
        if con.is_up():
            self.contact_history.on_contact_up(other, now)
            try:
                self.betweenness.observe(other, self.query_peer(con, 'get_own_betweenness'))
            except ContactLostError as e:
                logger.debug("%s", e)
        else:
            self.contact_history.on_contact_down(other, now)

    #*************** Messages ****************
    def create_new_message(self, message):
        message.set_property(ANT_ROLE, AntRole.FORWARD)
        message.set_property(DESTINATION_REF, message.to)
        return super().create_new_message(message)

    def accepts(self, message) -> bool:
        if message.id in self.processed_ants or message.id in self.incoming:
            return False
        if message.ant_role is AntRole.BACKWARD:
            # La fourmi retour remplace la copie aller éventuelle
            return True
        return super().accepts(message)

    def is_deliverable(self, message) -> bool:
        return message.ant_role is AntRole.FORWARD

    def switch_role_if_arrived(self, message) -> bool:
        """
        Bascule le message en fourmi retour s'il est à destination.
        La bascule n'a lieu qu'une fois.

        Returns:
            bool: True si le message est (désormais) une fourmi retour
        """
        if message.ant_role is AntRole.BACKWARD:
            return True
        if message.to is not self.host:
            return False
        message.set_property(ANT_ROLE, AntRole.BACKWARD)
        self.pheromone_table.tag_message(message)
        message.set_property(RETURN_PATH, list(message.path))
        logger.debug("%s: message %s arrivé à destination après %d sauts, devient fourmi retour",
                     self.host, message.id, message.hop_count)
        return True

    def previous_hop(self, message):
        """
        Nœud précédent sur le chemin aller de la fourmi retour.

        Returns:
            Node: le nœud vers lequel rendre la fourmi, ou None à l'origine
        """
        path = message.get_property(RETURN_PATH) or []
        for idx in range(len(path) - 1, -1, -1):
            if path[idx] is self.host:
                return path[idx - 1] if idx > 0 else None
        return None

    def on_message_arrived(self, message_id: str, from_node):
        message = super().on_message_arrived(message_id, from_node)
        if message is None:
            return None
        self.switch_role_if_arrived(message)
        if message.ant_role is AntRole.BACKWARD:
            self.reinforce(message, from_node)
        return message

    def reinforce(self, message, from_node):
        """
        Traitement d'une fourmi retour : betweenness locale et renforcement de
        l'arête (local, from_node). À l'origine du chemin, la fourmi est consommée.
        """
        self.processed_ants.add(message.id)
        self.betweenness.increment(self.host)
        self.pheromone_table.update_pheromone(self.host, from_node, message)
        if self.previous_hop(message) is None:
            self.remove_from_buffer(message.id)
            logger.debug("%s: fourmi retour %s revenue à l'origine", self.host, message.id)

    def on_transfer_done(self, message, to_node):
        # Les fourmis retour sont déplacées, les fourmis aller copiées
        own = self.get_message(message.id)
        if own is not None and own.ant_role is AntRole.BACKWARD:
            self.remove_from_buffer(message.id)

    #*************** Décision de transfert ****************
    def update(self):
        """
        Étape de décision : livraison directe, retour des fourmis, puis
        transfert opportuniste des fourmis aller.

        Returns:
            tuple: le couple (message, connexion) dont le transfert a démarré, ou None
        """
        if not self.can_start_transfer() or self.is_transferring():
            return None

        delivered = self.exchange_deliverable_messages()
        if delivered is not None:
            return delivered

        candidates = self.backward_candidates() + self.forward_candidates()
        if not candidates:
            return None
        return self.try_messages_for_connected(candidates)

    def backward_candidates(self):
        """
        Fourmis retour dont le nœud précédent sur le chemin aller est connecté.

        Returns:
            list[tuple]: couples (Message, Connection)
        """
        candidates = []
        for message in self.sorted_by_queue_mode(self.get_message_collection()):
            if message.ant_role is not AntRole.BACKWARD:
                continue
            hop = self.previous_hop(message)
            con = self.host.connection_to(hop) if hop is not None else None
            if con is None:
                continue
            try:
                if self.query_peer(con, 'accepts', message):
                    candidates.append((message, con))
            except ContactLostError as e:
                logger.debug("%s", e)
        return candidates

    def score(self, neighbor, message, neighbor_utility: float) -> float:
        """score(v) = α * τ(D, v) + β * U(v)"""
        return (self.alpha * self.pheromone_table.get_pheromone(neighbor, message)
                + self.beta * neighbor_utility)

    def _peer_utilities(self, destination):
        """
        Utilités des pairs disponibles (contacts actifs, pair non occupé).

        Returns:
            list[tuple]: couples (Connection, utilité du pair)
        """
        peers = []
        for con in self.host.get_connections():
            try:
                if self.query_peer(con, 'is_transferring'):
                    continue
                peers.append((con, self.query_peer(con, 'get_utility_for', destination)))
            except ContactLostError as e:
                logger.debug("%s", e)
        return peers

    def score_neighbors(self, message, peers=None):
        """
        Score de chaque pair éligible pour un message aller.

        Args:
            message (Message): message à router
            peers (list, optional): couples (Connection, utilité) déjà calculés

        Returns:
            list[tuple]: triplets (score, Connection, utilité du pair), dans l'ordre des connexions
        """
        if peers is None:
            peers = self._peer_utilities(message.to)
        scored = []
        for con, utility in peers:
            try:
                if not self.query_peer(con, 'accepts', message):
                    continue
            except ContactLostError as e:
                logger.debug("%s", e)
                continue
            neighbor = con.get_other_node(self.host)
            scored.append((self.score(neighbor, message, utility), con, utility))
        return scored

    @staticmethod
    def best_forwarder(scored):
        """
        Meilleur triplet (score, connexion, utilité) ; à égalité, la première connexion.
        Le choix est fait sur l'ensemble des pairs avant toute comparaison d'utilité.
        """
        best = None
        for entry in scored:
            if best is None or entry[0] > best[0]:
                best = entry
        return best

    def forward_candidates(self):
        """
        Couples (message, connexion) à proposer pour les fourmis aller, triés
        par utilité du pair décroissante puis selon le mode de file.

        Returns:
            list[tuple]: couples (Message, Connection)
        """
        peer_cache = {}
        candidates = []
        for message in self.get_message_collection():
            if self.switch_role_if_arrived(message):
                continue

            if message.to not in peer_cache:
                peer_cache[message.to] = (self._peer_utilities(message.to),
                                          self.get_utility_for(message.to))
            peers, local_utility = peer_cache[message.to]

            best = self.best_forwarder(self.score_neighbors(message, peers))
            if best is None:
                continue
            _, con, peer_utility = best
            if peer_utility > local_utility:
                candidates.append((message, con, peer_utility))

        candidates.sort(key=lambda c: (-c[2], self.queue_key(c[0])))
        return [(message, con) for message, con, _ in candidates]

    def get_routing_info(self) -> dict:
        info = super().get_routing_info()
        info.update({
            'utility': self.get_utility(),
            'betweenness': self.get_own_betweenness(),
            'contacts': len(self.contact_history),
            'pheromone': {
                str(dest): {str(n): value for n, value in self.pheromone_table.entries(dest).items()}
                for dest in self.pheromone_table.destinations()
            }
        })
        return info
