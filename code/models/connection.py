# models/connection.py
import math


class Connection:
    """
    Contact bidirectionnel entre deux nœuds.

    Une connexion porte au plus un transfert en cours. Pendant un transfert,
    les deux extrémités sont considérées comme occupées.
    """

    def __init__(self, node1, node2, start_time=0.0):
        """
        Constructeur d'un objet Connection

        Args:
            node1 (Node): première extrémité
            node2 (Node): seconde extrémité
            start_time (float, optional): instant d'ouverture du contact. Par défaut 0.0.
        """
        if node1 is node2:
            raise ValueError(f"Un nœud ne peut pas être en contact avec lui-même ({node1})")
        self.node1 = node1
        self.node2 = node2
        self.start_time = start_time
        self.up = True

        # Transfert en cours : message, émetteur et instant de fin
        self.message = None
        self.sender = None
        self.finish_time = None

    def __str__(self):
        state = "up" if self.up else "down"
        return f"{self.node1}<->{self.node2} ({state})"

    def __repr__(self):
        return f"Connection({self.node1!r}, {self.node2!r})"

    def get_other_node(self, node):
        """
        Renvoie l'autre extrémité de la connexion.

        Args:
            node (Node): une des extrémités

        Returns:
            Node: l'extrémité opposée
        """
        if node is self.node1:
            return self.node2
        if node is self.node2:
            return self.node1
        raise ValueError(f"{node} n'est pas une extrémité de {self}")

    def is_up(self):
        return self.up

    def is_transferring(self):
        return self.message is not None

    def start_transfer(self, sender, message, now, speed):
        """
        Démarre le transfert d'un message sur la connexion.

        Args:
            sender (Node): nœud émetteur
            message (Message): message transféré
            now (float): instant courant
            speed (float): débit de la connexion (octets par unité de temps)

        Returns:
            float: instant de fin du transfert
        """
        duration = max(1, math.ceil(message.size / speed)) if speed > 0 else 1
        self.message = message
        self.sender = sender
        self.finish_time = now + duration
        return self.finish_time

    def is_message_transferred(self, now):
        return self.message is not None and now >= self.finish_time

    def clear_transfer(self):
        """Libère la connexion et renvoie (message, émetteur) du transfert terminé ou interrompu."""
        message, sender = self.message, self.sender
        self.message = None
        self.sender = None
        self.finish_time = None
        return message, sender

    def set_up_state(self, up):
        self.up = up
