"""
ai package – Strategy-driven decision making for the agent.

Modules:
    strategy           – The four player-selectable strategies
    steering           – Stateless seek / flee / orbit / stop vectors
    threat_model       – Per-enemy threat scoring and target selection
    agent_ai           – Per-strategy state machine driving the agent
    simulation_runner  – Headless multi-run autopilot and profile chart
"""
