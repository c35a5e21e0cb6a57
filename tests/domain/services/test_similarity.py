"""Tests for cosine similarity and the similarity index."""

import math

import pytest

from claimwatch.domain.models.claim import Claim
from claimwatch.domain.services.similarity import SimilarityIndex, cosine_similarity


@pytest.mark.parametrize(
    "a,b",
    [
        ([1.0, 2.0, 3.0], [4.0, -5.0, 6.0]),
        ([0.5, 0.5], [0.1, 0.9]),
        ([-1.0, 0.0, 2.0], [3.0, 1.0, -1.0]),
    ],
)
def test_cosine_similarity_is_symmetric(a, b):
    assert math.isclose(cosine_similarity(a, b), cosine_similarity(b, a))


def test_cosine_similarity_of_vector_with_itself_is_one():
    vector = [0.3, -0.7, 2.5, 1.1]
    assert math.isclose(cosine_similarity(vector, vector), 1.0, rel_tol=1e-9)


@pytest.mark.parametrize(
    "a,b",
    [
        ([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]),
        ([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]),
        ([], [1.0]),
        ([], []),
        ([1.0, 2.0], [1.0, 2.0, 3.0]),
    ],
)
def test_cosine_similarity_degenerate_inputs_are_zero(a, b):
    assert cosine_similarity(a, b) == 0.0


def test_cosine_similarity_of_opposite_vectors():
    assert math.isclose(cosine_similarity([1.0, 2.0], [-1.0, -2.0]), -1.0)


@pytest.mark.asyncio
async def test_find_similar_orders_by_similarity_and_applies_threshold(store):
    close = await store.claims.add(Claim(text="close", embedding=[1.0, 0.1]))
    closer = await store.claims.add(Claim(text="closer", embedding=[1.0, 0.0]))
    await store.claims.add(Claim(text="far", embedding=[0.0, 1.0]))
    await store.claims.add(Claim(text="other dimension", embedding=[1.0, 0.0, 0.0]))

    index = SimilarityIndex(store.claims)
    matches = await index.find_similar([1.0, 0.0], threshold=0.9)

    assert [m.claim.id for m in matches] == [closer.id, close.id]
    assert matches[0].similarity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_find_similar_with_empty_vector_returns_nothing(store):
    await store.claims.add(Claim(text="anything", embedding=[1.0, 0.0]))
    assert await SimilarityIndex(store.claims).find_similar([]) == []


@pytest.mark.asyncio
async def test_cluster_hint_uses_closest_clustered_claim(store):
    await store.claims.add(Claim(text="unclustered twin", embedding=[1.0, 0.0]))
    await store.claims.add(Claim(text="clustered", embedding=[0.95, 0.05], cluster_id="cluster-1"))
    claim = await store.claims.add(Claim(text="new", embedding=[1.0, 0.0]))

    hint = await SimilarityIndex(store.claims).cluster_hint(claim, threshold=0.8)

    assert hint == "cluster-1"


@pytest.mark.asyncio
async def test_cluster_hint_ignores_the_claim_itself(store):
    claim = await store.claims.add(Claim(text="alone", embedding=[1.0, 0.0], cluster_id="own"))
    assert await SimilarityIndex(store.claims).cluster_hint(claim, threshold=0.8) is None


@pytest.mark.asyncio
async def test_cluster_hint_without_embedding_is_none(store):
    claim = Claim(text="no vector")
    assert await SimilarityIndex(store.claims).cluster_hint(claim, threshold=0.8) is None
