"""Cluster orchestration domain exports."""

from .compose_cluster import ClusterError, ComposeCluster

__all__ = ["ClusterError", "ComposeCluster"]
