"""Connectivity graph: nets of (branch, polarity) pairs stored in an arena."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple


logger = logging.getLogger(__name__)

NetId = int
BranchPolarity = Tuple[int, int]


class NetArena:
    """
    Nets addressed by stable integer ids.

    The active id list (creation order) and the name mapping both refer to
    arena ids, so merging never leaves a name pointing at a removed net.
    Nets are identified by id only; two nets with equal contents stay
    distinct.
    """

    def __init__(self) -> None:
        self._contents: List[List[BranchPolarity]] = []
        self._active: List[NetId] = []
        self._names: Dict[str, NetId] = {}
        self._owner: Dict[BranchPolarity, NetId] = {}

    def __len__(self) -> int:
        return len(self._active)

    @property
    def ids(self) -> Tuple[NetId, ...]:
        return tuple(self._active)

    @property
    def names(self) -> Dict[str, NetId]:
        return dict(self._names)

    def contents(self, net: NetId) -> List[BranchPolarity]:
        return list(self._contents[net])

    def create(self, pairs: Iterable[BranchPolarity] = ()) -> NetId:
        net = len(self._contents)
        self._contents.append(list(pairs))
        self._active.append(net)
        for pair in self._contents[net]:
            self._owner.setdefault(pair, net)
        return net

    def find(self, pairs: Sequence[BranchPolarity]) -> Optional[NetId]:
        """Id of the net containing the first of ``pairs`` found in any net."""
        for pair in pairs:
            net = self._owner.get(pair)
            if net is not None:
                return net
        return None

    def named(self, name: str) -> NetId:
        """Id of the net registered under ``name``, creating an empty one if needed."""
        if name not in self._names:
            self._names[name] = self.create()
        return self._names[name]

    def merge(self, nets: Sequence[NetId]) -> NetId:
        """Merge all nets into the first one and return its id."""
        unique: List[NetId] = []
        for net in nets:
            if net not in unique:
                unique.append(net)
        survivor = unique[0]
        for absorbed in unique[1:]:
            moved = self._contents[absorbed]
            self._contents[survivor].extend(moved)
            self._contents[absorbed] = []
            self._active.remove(absorbed)
            for pair in moved:
                if self._owner.get(pair) == absorbed:
                    self._owner[pair] = survivor
            for name, net in self._names.items():
                if net == absorbed:
                    self._names[name] = survivor
            logger.debug("Merged net %d (%d pairs) into net %d.", absorbed, len(moved), survivor)
        return survivor
