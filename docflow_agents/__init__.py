"""docflow_agents.

Short-lived agent resources for document-processing workflows on a remote
agent-hosting platform.

Each workflow execution gets its own vector store, uploads its documents
into it, creates the agents it needs against that store, and tears
everything down when it finishes. Stale resources left behind by crashed
executions are swept by a bulk cleanup service.

Core subpackages
----------------

- ``docflow_agents.core``:

  - Settings, the agent configuration document and its models.
  - The exception hierarchy and logging setup.

- ``docflow_agents.platform_client``:

  - Async REST client for the platform and its credential kinds.

- ``docflow_agents.info_provider``:

  - Provider registry (provider name -> client) and prompt rendering.

- ``docflow_agents.vector_store``:

  - Per-workflow vector stores and the indexing readiness protocol.

- ``docflow_agents.cleanup``:

  - Best-effort bulk deletion with protected-resource exclusion.

- ``docflow_agents.agent_core``:

  - ``AgentFactory``: create, run and tear down one remote agent.

Typical workflow
----------------

1. Load the configuration with ``core.config.load_agent_config``.
2. Build a ``ProviderRegistry`` and a ``VectorStoreManager``.
3. Create a store and add the documents to it.
4. Create an ``AgentFactory`` per agent key, ``create_agent(store_id)``, then
   ``run_with_polling(...)``.
5. ``cleanup()`` each factory and run ``WorkflowCleanup`` on the result.
"""
