"""
Linked-node FIFO queue and LIFO stack.

Each container owns its nodes. Copies rebuild the node chain so a snapshot
can be drained for display without touching the live container.
"""
import copy
from typing import Any, Iterator, Optional

from bracket.exceptions import EmptyContainerError


class _Node:
    __slots__ = ('data', 'next')

    def __init__(self, data, next=None):
        self.data = data
        self.next = next


class Queue:
    """First-in first-out container."""

    def __init__(self, items=None):
        self._front: Optional[_Node] = None
        self._rear: Optional[_Node] = None
        self._count = 0
        for item in items or ():
            self.enqueue(item)

    def is_empty(self) -> bool:
        return self._count == 0

    def size(self) -> int:
        return self._count

    def enqueue(self, item: Any) -> None:
        node = _Node(item)
        if self._rear is None:
            self._front = self._rear = node
        else:
            self._rear.next = node
            self._rear = node
        self._count += 1

    def dequeue(self) -> Any:
        if self.is_empty():
            raise EmptyContainerError("Queue is empty, cannot dequeue.")
        node = self._front
        self._front = node.next
        if self._front is None:
            self._rear = None
        self._count -= 1
        return node.data

    def peek(self) -> Any:
        if self.is_empty():
            raise EmptyContainerError("Queue is empty, cannot peek.")
        return self._front.data

    def copy(self) -> "Queue":
        """Return an independent queue holding the same items in the same order."""
        return Queue(self)

    def drain(self) -> list:
        """Dequeue every item, oldest first."""
        items = []
        while not self.is_empty():
            items.append(self.dequeue())
        return items

    def __iter__(self) -> Iterator[Any]:
        current = self._front
        while current is not None:
            yield current.data
            current = current.next

    def __len__(self):
        return self._count

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return Queue(copy.deepcopy(item, memo) for item in self)

    def __repr__(self):
        return f"Queue({list(self)!r})"


class Stack:
    """Last-in first-out container."""

    def __init__(self, items=None):
        self._top: Optional[_Node] = None
        self._count = 0
        for item in items or ():
            self.push(item)

    def is_empty(self) -> bool:
        return self._count == 0

    def size(self) -> int:
        return self._count

    def push(self, item: Any) -> None:
        self._top = _Node(item, self._top)
        self._count += 1

    def pop(self) -> Any:
        if self.is_empty():
            raise EmptyContainerError("Stack is empty, cannot pop.")
        node = self._top
        self._top = node.next
        self._count -= 1
        return node.data

    def peek(self) -> Any:
        if self.is_empty():
            raise EmptyContainerError("Stack is empty, cannot peek.")
        return self._top.data

    def copy(self) -> "Stack":
        """Return an independent stack with the same top-to-bottom order."""
        # Iteration runs top to bottom, so push in reverse to keep the top on top.
        return Stack(reversed(list(self)))

    def __iter__(self) -> Iterator[Any]:
        current = self._top
        while current is not None:
            yield current.data
            current = current.next

    def __len__(self):
        return self._count

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return Stack(copy.deepcopy(item, memo) for item in reversed(list(self)))

    def __repr__(self):
        return f"Stack({list(self)!r})"
