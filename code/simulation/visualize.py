# simulation/visualize.py
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np


def plot_delivery_over_time(stats, end_time, filename):
    """Trace le nombre cumulé de messages créés et livrés au cours du temps.

    Args:
        stats: Instance de MessageStats
        end_time: Instant de fin de la simulation
        filename: Chemin du fichier PNG à écrire
    """
    times = np.arange(0, end_time + 1)
    created = np.array(sorted(stats.created.values()))
    delivered = np.array(sorted(stats.delivery_times))
    created_cum = np.searchsorted(created, times, side='right')
    delivered_cum = np.searchsorted(delivered, times, side='right')

    plt.figure(figsize=(10, 6))
    plt.plot(times, created_cum, label='Créés', color='gray', linestyle='--')
    plt.plot(times, delivered_cum, label='Livrés', color='royalblue')
    plt.xlabel('Temps')
    plt.ylabel('Messages')
    plt.title(f"Livraisons cumulées (ratio final {stats.delivery_ratio():.2f})")
    plt.legend()
    plt.grid(True, linestyle='--', alpha=0.7)
    os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
    plt.savefig(filename, bbox_inches='tight')
    plt.close()


def plot_pheromone_heatmap(router, filename, title=None):
    """Trace la table de phéromones d'un routeur (destinations x voisins).

    Args:
        router: Instance de CulturalACORouter
        filename: Chemin du fichier PNG à écrire
        title: Titre du graphique

    Returns:
        bool: False si la table est vide (aucun fichier écrit)
    """
    df = router.pheromone_table.as_dataframe()
    if df.empty:
        return False
    pivot = df.pivot_table(index='destination', columns='neighbor',
                           values='pheromone', fill_value=0.0)

    plt.figure(figsize=(8, 6))
    plt.imshow(pivot.values, cmap='viridis', aspect='auto')
    plt.colorbar(label='Phéromone')
    plt.xticks(range(len(pivot.columns)), pivot.columns, rotation=45)
    plt.yticks(range(len(pivot.index)), pivot.index)
    plt.xlabel('Voisin')
    plt.ylabel('Destination')
    plt.title(title or f"Phéromones du nœud {router.host}")
    os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
    plt.savefig(filename, bbox_inches='tight')
    plt.close()
    return True
