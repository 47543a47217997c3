#!/usr/bin/env python3
# protocols/__init__.py
"""
Package des protocoles DTN.

Ce package contient le routeur Cultural ACO pour les réseaux tolérants aux
délais (DTN) et ses briques d'apprentissage.

Composants disponibles:
- DTNRouter: Classe de base définissant l'interface commune des routeurs
- CulturalACORouter: Routeur combinant phéromones (fourmis aller/retour) et utilité culturelle
- PheromoneTable: Table destination -> voisin -> phéromone
- ContactHistory / BetweennessCounter: Historique des contacts et compteur de passages
- Centrality: Estimateurs de centralité globale (fenêtre glissante, cumulée, degré)
- UtilityEngine: Combinaison betweenness normalisée + centralité
"""

from protocols.base import DTNRouter
from protocols.centrality import (Centrality, CWindowCentrality, DegreeCentrality,
                                  SWindowCentrality, create_centrality)
from protocols.contact_history import BetweennessCounter, ContactHistory, Duration
from protocols.cultural_aco import CulturalACORouter, CulturalACOSettings
from protocols.errors import ContactLostError, RoutingError
from protocols.pheromone import PheromoneTable
from protocols.utility import UtilityEngine

__all__ = ['DTNRouter', 'CulturalACORouter', 'CulturalACOSettings', 'PheromoneTable',
           'ContactHistory', 'BetweennessCounter', 'Duration', 'Centrality',
           'SWindowCentrality', 'CWindowCentrality', 'DegreeCentrality', 'create_centrality',
           'UtilityEngine', 'RoutingError', 'ContactLostError']
