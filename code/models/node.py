# models/node.py

class Node:
    """
    Représente un nœud (hôte) d'un réseau opportuniste.

    Le nœud n'a pas de comportement propre : il porte son identité, la liste
    de ses contacts actifs et le routeur qui prend les décisions à sa place.
    """

    def __init__(self, id, router=None):
        """
        Constructeur d'un objet Node

        Args:
            id (int): numéro d'identification du nœud (obligatoire)
            router (DTNRouter, optional): routeur du nœud. Par défaut None.
        """
        self.id = int(id)
        self.connections = []  # Liste des connexions actives
        self.router = None
        if router is not None:
            self.set_router(router)

    def __str__(self):
        """
        Descripteur de l'objet Node

        Returns:
            str: description textuelle du nœud
        """
        return f"n{self.id}"

    def __repr__(self):
        return f"Node({self.id})"

    def set_router(self, router):
        """
        Associe un routeur au nœud et initialise le routeur avec ce nœud.

        Args:
            router (DTNRouter): le routeur à utiliser.
        """
        self.router = router
        router.init(self)

    #*************** Opérations courantes ****************
    def add_connection(self, con):
        """
        Ajoute une connexion à la liste des contacts actifs si elle n'y est pas déjà.

        Args:
            con (Connection): la connexion à ajouter.
        """
        if con not in self.connections:
            self.connections.append(con)

    def remove_connection(self, con):
        """
        Supprime une connexion de la liste des contacts actifs si elle y est présente.

        Args:
            con (Connection): la connexion à supprimer
        """
        if con in self.connections:
            self.connections.remove(con)

    def get_connections(self):
        """Renvoie les connexions actives du nœud."""
        return [con for con in self.connections if con.is_up()]

    def connection_to(self, node):
        """
        Cherche la connexion active vers un nœud donné.

        Args:
            node (Node): le nœud voisin recherché.

        Returns:
            Connection: la connexion, ou None si les nœuds ne sont pas en contact.
        """
        for con in self.get_connections():
            if con.get_other_node(self) is node:
                return con
        return None

    def degree(self):
        """
        Calcule le degré (nombre de contacts actifs) du nœud.

        Returns:
            int: le nombre de voisins du nœud.
        """
        return len(self.get_connections())

    def get_neighbors_ids(self):
        """
        Récupère les IDs des voisins du nœud.

        Returns:
            list(int): liste des IDs des voisins
        """
        return [con.get_other_node(self).id for con in self.get_connections()]
