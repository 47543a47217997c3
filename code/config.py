# config.py
import os

# Configuration centralisée pour tout le projet
CONFIG = {
    'trace': None,  # Chemin d'une trace de contacts CSV (None = topologie synthétique)
    'outdir': '../data_logs',
    'CulturalACORouter': {
        'centralityAlg': 'SWindowCentrality',
        'evaporationRate': 0.1,   # Taux d'évaporation de la phéromone
        'alpha': 0.6,             # Poids de la phéromone
        'beta': 0.4,              # Poids de l'utilité
        'queueMode': 'fifo'       # Départage des candidats à utilité égale
    },
    'SWindowCentrality': {
        'timeWindow': 60,         # Fenêtre glissante (en pas de temps)
        'epochLength': 10
    },
    'CWindowCentrality': {
        'epochLength': 10
    },
    'DegreeCentrality': {},
    'simulation': {
        'end_time': 200,
        'tick': 1,
        'transfer_speed': 250,    # Octets transférés par pas de temps
        'seed': 42
    },
    'synthetic': {
        'nodes': 20,
        'connectivity': 0.08,
        'steps': 200
    },
    'generator': {
        'interval': (5, 15),
        'size': (200, 500),
        'prefix': 'M',
        'window': (0, 150),
        'response_size': 500      # Taille des réponses (0 = messages sans réponse)
    }
}

# Paramètres du routeur (pour accès facile)
ROUTER_NS = 'CulturalACORouter'
CENTRALITY_ALG = CONFIG[ROUTER_NS]['centralityAlg']
EVAPORATION_RATE = CONFIG[ROUTER_NS]['evaporationRate']
ALPHA = CONFIG[ROUTER_NS]['alpha']
BETA = CONFIG[ROUTER_NS]['beta']

# Paramètres de simulation (pour accès facile)
END_TIME       = CONFIG['simulation']['end_time']
TICK           = CONFIG['simulation']['tick']
TRANSFER_SPEED = CONFIG['simulation']['transfer_speed']
SEED           = CONFIG['simulation']['seed']

# Chemins et constantes
PATH   = CONFIG['trace']
OUTDIR = CONFIG['outdir']


def ensure_outdir(subdir=None):
    """
    Crée le dossier de sortie s'il n'existe pas.

    Args:
        subdir (str, optional): sous-dossier à créer dans OUTDIR

    Returns:
        str: chemin du dossier créé
    """
    path = OUTDIR if subdir is None else os.path.join(OUTDIR, subdir)
    os.makedirs(path, exist_ok=True)
    return path
