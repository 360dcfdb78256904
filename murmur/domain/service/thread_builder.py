"""Conversation tree reconstruction.

Comments are loaded flat for one target path and regrouped here:

- every reply belongs to the top-level comment found by following
  ``parent_id`` (replies whose chain is broken or cyclic are dropped)
- top-level comments are paged, each with a *preview* of its replies
- the preview keeps the newest chain heads (replies addressed to the
  top-level comment itself) plus every reply chained to them through
  ``reply_to_id``
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional, TypeVar

import logfire

from murmur.domain.model import Comment
from murmur.domain.value import CommentId
from murmur.util.graph import find_root, walk_preorder

from .base import Service

PREVIEW_LIMIT = 3

T = TypeVar("T")


@dataclass
class ThreadItem:
    """A comment placed in a thread, with its display companions."""

    comment: Comment
    parent: Optional[Comment] = None
    # Comment shown as "replying to", falls back to the parent for old data
    reply_to: Optional[Comment] = None
    children: list["ThreadItem"] = field(default_factory=list)
    total_children: int = 0


@dataclass
class ThreadPage:
    """One page of thread items."""

    items: list[ThreadItem]
    total: int
    total_with_children: int
    page: int
    page_size: int


def paginate(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Slice a 1-based page out of ``items``; out of range pages are empty."""
    start = (max(page, 1) - 1) * page_size
    return list(items[start : start + page_size])


def newest_first(comments: Iterable[Comment]) -> list[Comment]:
    return sorted(comments, key=lambda c: c.created_at, reverse=True)


def root_order(comment: Comment) -> tuple:
    """Sort key for top-level comments: pinned (latest pin first), then newest."""
    pinned = comment.pinned_at.timestamp() if comment.pinned_at else 0.0
    return (comment.pinned_at is None, -pinned, -comment.created_at.timestamp())


class CommentGraph:
    """Lookup tables over the published comments of one target path.

    Built once per request; every traversal afterwards is a dictionary walk.
    """

    def __init__(self, comments: Sequence[Comment]) -> None:
        self.comments = list(comments)
        self.by_id: dict[CommentId, Comment] = {c.id: c for c in self.comments}
        self.roots = [c for c in self.comments if c.is_top_level]

        self.children: dict[CommentId, list[CommentId]] = defaultdict(list)
        self.replies: dict[CommentId, list[CommentId]] = defaultdict(list)
        for c in self.comments:
            if c.parent_id is not None:
                self.children[c.parent_id].append(c.id)
            if c.reply_to_id is not None:
                self.replies[c.reply_to_id].append(c.id)

        parent_of = {c.id: c.parent_id for c in self.comments}
        self.descendants: dict[CommentId, list[Comment]] = defaultdict(list)
        dropped = 0
        for c in self.comments:
            if c.is_top_level:
                continue
            root_id = find_root(c.id, parent_of)
            if root_id is None:
                dropped += 1
                continue
            self.descendants[root_id].append(c)
        if dropped:
            logfire.warn("Replies with broken ancestry excluded", count=dropped)

    def subtree(self, comment_id: CommentId) -> list[Comment]:
        """Every structural descendant of ``comment_id``, in pre-order."""
        order = walk_preorder(self.children.get(comment_id, []), self.children)
        return [self.by_id[i] for i in order if i != comment_id]

    def preview(
        self,
        anchor_id: CommentId,
        candidates: Sequence[Comment],
        limit: int = PREVIEW_LIMIT,
    ) -> list[Comment]:
        """Newest ``limit`` chain heads under ``anchor_id`` with their full chains.

        Args:
            anchor_id: Comment whose replies are previewed
            candidates: Comments allowed in the preview (the anchor's descendants)
            limit: Number of chain heads kept

        Returns:
            Chain heads, each followed by its reply chain in pre-order
        """
        allowed = {c.id for c in candidates}
        heads = newest_first(
            c
            for c in candidates
            if c.reply_to_id is None or c.reply_to_id == anchor_id
        )[:limit]
        successors = {
            comment_id: [r for r in self.replies.get(comment_id, []) if r in allowed]
            for comment_id in allowed
        }
        order = walk_preorder([h.id for h in heads], successors)
        return [self.by_id[i] for i in order]

    def item(self, comment: Comment) -> ThreadItem:
        parent = self.by_id.get(comment.parent_id) if comment.parent_id else None
        target_id = comment.reply_target_id
        reply_to = self.by_id.get(target_id) if target_id else None
        return ThreadItem(comment=comment, parent=parent, reply_to=reply_to)


class ThreadBuilder(Service):
    """Builds paged thread views from a flat comment list."""

    def __init__(self, preview_limit: int = PREVIEW_LIMIT) -> None:
        self.preview_limit = preview_limit

    def build_page(
        self, comments: Sequence[Comment], page: int, page_size: int
    ) -> ThreadPage:
        """Page of top-level comments, each with a reply preview.

        Args:
            comments: All published comments of one target path
            page: 1-based page number
            page_size: Top-level comments per page

        Returns:
            ``total`` counts top-level comments, ``total_with_children``
            counts every comment given
        """
        graph = CommentGraph(comments)
        roots = sorted(graph.roots, key=root_order)

        items = []
        for root in paginate(roots, page, page_size):
            descendants = graph.descendants.get(root.id, [])
            item = graph.item(root)
            item.total_children = len(descendants)
            item.children = [
                graph.item(c)
                for c in graph.preview(root.id, descendants, self.preview_limit)
            ]
            items.append(item)

        return ThreadPage(
            items=items,
            total=len(roots),
            total_with_children=len(graph.comments),
            page=page,
            page_size=page_size,
        )

    def build_children(
        self,
        comments: Sequence[Comment],
        parent_id: CommentId,
        page: int,
        page_size: int,
    ) -> ThreadPage:
        """Replies below one comment.

        The first page with a page size up to the preview limit returns the
        chain preview; any other request pages through every descendant,
        newest first.
        """
        graph = CommentGraph(comments)
        descendants = graph.subtree(parent_id)

        if page == 1 and page_size <= self.preview_limit:
            selected = graph.preview(parent_id, descendants, self.preview_limit)
        else:
            selected = paginate(newest_first(descendants), page, page_size)

        return ThreadPage(
            items=[graph.item(c) for c in selected],
            total=len(descendants),
            total_with_children=len(descendants),
            page=page,
            page_size=page_size,
        )
