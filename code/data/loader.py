# data/loader.py
import logging
from collections import namedtuple

import networkx as nx
import pandas as pd

logger = logging.getLogger(__name__)

ContactEvent = namedtuple('ContactEvent', ['time', 'a', 'b', 'up'])

TRACE_COLUMNS = ('time', 'node_a', 'node_b', 'state')
STATES = {'up': True, 'down': False}


def load_contact_trace(path):
    """
    Charge une trace de contacts au format CSV.

    Le fichier doit contenir les colonnes time, node_a, node_b, state
    (state valant 'up' ou 'down').

    Args:
        path: Chemin du fichier CSV

    Returns:
        tuple: (liste de ContactEvent triée par temps, nombre de nœuds)

    Raises:
        ValueError: si des colonnes manquent, si un état est inconnu, ou si un
            contact relie un nœud à lui-même ou porte un id négatif
    """
    logger.info("### Importation de la trace de contacts %s ###", path)
    df = pd.read_csv(path, header=0, skipinitialspace=True)
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in TRACE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Colonnes manquantes dans {path}: {', '.join(missing)}")

    states = df['state'].astype(str).str.strip().str.lower()
    unknown = sorted(set(states) - set(STATES))
    if unknown:
        raise ValueError(f"États de contact inconnus dans {path}: {', '.join(unknown)}")

    # Numéros de ligne du fichier (l'en-tête est la ligne 1)
    invalid = df[(df['node_a'] == df['node_b']) | (df['node_a'] < 0) | (df['node_b'] < 0)]
    if len(invalid):
        rows = ', '.join(str(i + 2) for i in invalid.index)
        raise ValueError(f"Contacts invalides dans {path} (nœud avec lui-même ou id négatif), "
                         f"lignes {rows}")

    df =df.assign(up=states.map(STATES)).sort_values('time', kind='stable')
    events = [
        ContactEvent(float(row.time), int(row.node_a), int(row.node_b), bool(row.up))
        for row in df.itertuples(index=False)
    ]
    num_nodes = int(max(df['node_a'].max(), df['node_b'].max()) + 1) if len(df) else 0
    logger.info("%d événements de contact, %d nœuds", len(events), num_nodes)
    return events, num_nodes


def adjacency_to_contact_events(adjacency_by_time):
    """
    Convertit une suite de dictionnaires d'adjacence en événements de contact.

    Args:
        adjacency_by_time (dict[int, dict[int, set[int]]]): adjacence à chaque instant t
            Format: {t: {id_nœud: {id_voisin1, id_voisin2, ...}, ...}, ...}

    Returns:
        list[ContactEvent]: ouvertures et fermetures de contacts triées par temps
    """
    events = []
    previous = set()
    for t in sorted(adjacency_by_time):
        current = {
            (min(i, j), max(i, j))
            for i, neighbors in adjacency_by_time[t].items()
            for j in neighbors if i != j
        }
        for a, b in sorted(previous - current):
            events.append(ContactEvent(float(t), a, b, False))
        for a, b in sorted(current - previous):
            events.append(ContactEvent(float(t), a, b, True))
        previous = current
    return events


def random_adjacency(num_nodes, connectivity, steps, seed=None):
    """
    Crée une série de réseaux dynamiques aléatoires (graphes d'Erdős–Rényi).

    Args:
        num_nodes: Nombre de nœuds dans le réseau
        connectivity: Probabilité de connexion entre deux nœuds (0-1)
        steps: Nombre de pas de temps à simuler
        seed: Graine aléatoire

    Returns:
        dict: {t: dictionnaire d'adjacence}
    """
    adjacency = {}
    for t in range(steps):
        G = nx.erdos_renyi_graph(num_nodes, connectivity,
                                 seed=None if seed is None else seed + t)
        adjacency[t] = {i: set(G.neighbors(i)) for i in range(num_nodes)}
    return adjacency


def trace_to_dataframe(events):
    """Exporte des événements de contact au format de trace CSV."""
    return pd.DataFrame(
        [(e.time, e.a, e.b, 'up' if e.up else 'down') for e in events],
        columns=list(TRACE_COLUMNS)
    )
