#!/usr/bin/env python3
# protocols/centrality.py
"""
Estimateurs de centralité globale à partir de l'historique des contacts.

Tous les estimateurs partagent la même interface :
- global_centrality(history, now) : réel >= 0, non décroissant quand les contacts
  deviennent plus nombreux ou plus longs ;
- replicate() : nouvel estimateur avec la même configuration et sans état.

Estimateurs disponibles:
- SWindowCentrality: nombre moyen de voisins distincts par époque sur une fenêtre glissante
- CWindowCentrality: même mesure, cumulée sur tout l'historique
- DegreeCentrality: nombre de voisins distincts rencontrés
"""
import math

import numpy as np


def _as_mapping(history):
    """Accepte un ContactHistory ou un dictionnaire voisin -> [Duration]."""
    if hasattr(history, 'as_mapping'):
        return history.as_mapping()
    return history or {}


def _latest_end(mapping):
    ends = [d.end for durations in mapping.values() for d in durations]
    return max(ends) if ends else None


class Centrality:
    """
    Interface commune des estimateurs de centralité.
    """

    name = 'Centrality'

    def global_centrality(self, history, now=None) -> float:
        """
        Calcule la centralité globale du nœud.

        Args:
            history (ContactHistory | dict): historique des contacts du nœud
            now (float, optional): instant courant. Par défaut la fin du dernier contact.

        Returns:
            float: centralité globale (>= 0)
        """
        raise NotImplementedError("Cette méthode doit être implémentée par les sous-classes")

    def replicate(self):
        raise NotImplementedError("Cette méthode doit être implémentée par les sous-classes")

    @classmethod
    def from_config(cls, params: dict):
        return cls()


class SWindowCentrality(Centrality):
    """
    Centralité à fenêtre glissante.

    La fenêtre [now - time_window, now] est découpée en époques de longueur
    epoch_length comptées à rebours depuis now. Pour chaque époque on compte
    les voisins distincts avec lesquels un contact a eu lieu ; le résultat est
    la moyenne de ces comptes sur les époques de la fenêtre.
    """

    name = 'SWindowCentrality'

    def __init__(self, time_window: float = 21600, epoch_length: float = 3600):
        if time_window <= 0 or epoch_length <= 0:
            raise ValueError("timeWindow et epochLength doivent être strictement positifs")
        self.time_window = time_window
        self.epoch_length = epoch_length

    @property
    def epoch_count(self) -> int:
        return max(1, math.ceil(self.time_window / self.epoch_length))

    @classmethod
    def from_config(cls, params: dict):
        return cls(time_window=params.get('timeWindow', 21600),
                   epoch_length=params.get('epochLength', 3600))

    def replicate(self):
        return SWindowCentrality(self.time_window, self.epoch_length)

    def _epoch(self, now, t):
        # Époque 0 = la plus récente
        return min(self.epoch_count - 1, int((now - t) // self.epoch_length))

    def global_centrality(self, history, now=None) -> float:
        mapping = _as_mapping(history)
        if now is None:
            now = _latest_end(mapping)
        if now is None:
            return 0.0

        window_start = now - self.time_window
        counts = np.zeros(self.epoch_count)
        for durations in mapping.values():
            seen = np.zeros(self.epoch_count, dtype=bool)
            for d in durations:
                if d.end < window_start or d.start > now:
                    continue
                newest = self._epoch(now, min(d.end, now))
                oldest = self._epoch(now, max(d.start, window_start))
                seen[newest:oldest + 1] = True
            counts += seen
        return float(counts.mean())


class CWindowCentrality(Centrality):
    """
    Centralité à fenêtre cumulée : voisins distincts par époque depuis l'instant 0,
    moyennés sur toutes les époques écoulées.
    """

    name = 'CWindowCentrality'

    def __init__(self, epoch_length: float = 3600):
        if epoch_length <= 0:
            raise ValueError("epochLength doit être strictement positif")
        self.epoch_length = epoch_length

    @classmethod
    def from_config(cls, params: dict):
        return cls(epoch_length=params.get('epochLength', 3600))

    def replicate(self):
        return CWindowCentrality(self.epoch_length)

    def global_centrality(self, history, now=None) -> float:
        mapping = _as_mapping(history)
        if now is None:
            now = _latest_end(mapping)
        if now is None or now <= 0:
            return 0.0

        n_epochs = max(1, math.ceil(now / self.epoch_length))
        counts = np.zeros(n_epochs)
        for durations in mapping.values():
            seen = np.zeros(n_epochs, dtype=bool)
            for d in durations:
                if d.start > now:
                    continue
                first = min(n_epochs - 1, int(max(d.start, 0) // self.epoch_length))
                last = min(n_epochs - 1, int(min(d.end, now) // self.epoch_length))
                seen[first:last + 1] = True
            counts += seen
        return float(counts.mean())


class DegreeCentrality(Centrality):
    """Nombre de voisins distincts avec au moins un contact terminé."""

    name = 'DegreeCentrality'

    def replicate(self):
        return DegreeCentrality()

    def global_centrality(self, history, now=None) -> float:
        mapping = _as_mapping(history)
        return float(sum(
            1 for durations in mapping.values()
            if any(now is None or d.start <= now for d in durations)
        ))


CENTRALITY_ALGORITHMS = {
    SWindowCentrality.name: SWindowCentrality,
    CWindowCentrality.name: CWindowCentrality,
    DegreeCentrality.name: DegreeCentrality,
}


def create_centrality(name: str, params: dict = None) -> Centrality:
    """
    Instancie un estimateur de centralité à partir de son nom.

    Args:
        name (str): nom de l'algorithme (clé de CENTRALITY_ALGORITHMS)
        params (dict, optional): paramètres de configuration de l'algorithme

    Raises:
        ValueError: si l'algorithme est inconnu
    """
    try:
        cls = CENTRALITY_ALGORITHMS[name]
    except KeyError:
        raise ValueError(
            f"Algorithme de centralité inconnu: {name} "
            f"(disponibles: {', '.join(sorted(CENTRALITY_ALGORITHMS))})"
        ) from None
    return cls.from_config(params or {})
