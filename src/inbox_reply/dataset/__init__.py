"""Labelled instances, data sets and the records exchanged with the inference engine."""

from inbox_reply.dataset.dataset import Counter, DataSet
from inbox_reply.dataset.inputs import InputMode, Inputs, InputsCollection, get_instances
from inbox_reply.dataset.instance import Instance
from inbox_reply.dataset.variables import (
    CommunityPosteriors,
    CommunityPriors,
    Gamma,
    Gaussian,
    Posteriors,
    Priors,
    WeightSummary,
)

__all__ = [
    "CommunityPosteriors",
    "CommunityPriors",
    "Counter",
    "DataSet",
    "Gamma",
    "Gaussian",
    "InputMode",
    "Inputs",
    "InputsCollection",
    "Instance",
    "Posteriors",
    "Priors",
    "WeightSummary",
    "get_instances",
]
