"""Host ownership graph: a tree of Instances rooted at a DataModel.

Parents hold their children strongly and children hold their parent, so a
detached subtree lives only as long as something outside the tree (or the
cycle collector's patience) keeps it.
"""
from .config import ROOT_NAME, DEFAULT_INSTANCE_NAME
from .errors import InvalidArgument, ParentLocked
from .events import Signal


class Instance:
    """Node of the ownership graph.

    `ancestry_changed(child, new_parent)` fires on the reparented instance and
    on every one of its descendants, synchronously, after the move.
    """

    def __init__(self, name=DEFAULT_INSTANCE_NAME, parent=None):
        self.name = name
        self._parent = None
        self._children = []
        self._destroyed = False
        self.ancestry_changed = Signal(f'{name}.AncestryChanged')
        if parent is not None:
            self.parent = parent

    # ── Tree ──
    @property
    def parent(self):
        return self._parent

    @parent.setter
    def parent(self, new_parent):
        if self._destroyed:
            raise ParentLocked(f'{self.name} has been destroyed; parent is locked')
        if new_parent is self._parent:
            return
        if new_parent is not None:
            if not isinstance(new_parent, Instance):
                raise InvalidArgument(f'parent must be an Instance, got {new_parent!r}')
            if new_parent._destroyed:
                raise InvalidArgument(f'cannot parent {self.name} to destroyed {new_parent.name}')
            if new_parent is self or new_parent.is_descendant_of(self):
                raise InvalidArgument(f'parenting {self.name} to {new_parent.name} '
                                      f'would create a cycle')
        old = self._parent
        if old is not None:
            old._children.remove(self)
        self._parent = new_parent
        if new_parent is not None:
            new_parent._children.append(self)
        self._fire_ancestry_changed(new_parent)

    def _fire_ancestry_changed(self, new_parent):
        affected = [self] + self.get_descendants()
        for inst in affected:
            inst.ancestry_changed.fire(self, new_parent)

    @property
    def children(self):
        return list(self._children)

    def get_descendants(self):
        out = []
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            out.append(node)
            stack.extend(reversed(node._children))
        return out

    def is_descendant_of(self, other):
        node = self._parent
        while node is not None:
            if node is other:
                return True
            node = node._parent
        return False

    def find_first_child(self, name):
        for child in self._children:
            if child.name == name:
                return child
        return None

    # ── Lifetime ──
    @property
    def destroyed(self):
        return self._destroyed

    def destroy(self):
        """Destroy descendants, detach, lock the parent and drop all handlers."""
        if self._destroyed:
            return
        for child in list(self._children):
            child.destroy()
        self.parent = None
        self._destroyed = True
        self.ancestry_changed.disconnect_all()

    def full_name(self):
        parts = []
        node = self
        while node is not None:
            parts.append(node.name)
            node = node._parent
        return '.'.join(reversed(parts))

    def __repr__(self):
        return f'<{type(self).__name__} {self.full_name()}>'


class DataModel(Instance):
    """Root of an ownership graph. Its parent is always None."""

    def __init__(self, name=ROOT_NAME):
        super().__init__(name)

    @Instance.parent.setter
    def parent(self, new_parent):
        if new_parent is not None:
            raise ParentLocked(f'{self.name} is a root; its parent cannot be set')


# Process-wide primary ownership graph
game = DataModel()


def is_accessible(instance, root=None):
    """True if `instance` is reachable from `root` (default: `game`)."""
    if root is None:
        root = game
    return instance is root or instance.is_descendant_of(root)


def ancestry_changed(instance):
    """Event source keyed by instance: fires when its position in the tree may have changed."""
    if instance is None:
        raise InvalidArgument('instance is None')
    if not isinstance(instance, Instance):
        raise InvalidArgument(f'expected an Instance, got {type(instance).__name__}')
    if instance.destroyed:
        raise InvalidArgument(f'{instance.name} has been destroyed')
    return instance.ancestry_changed
