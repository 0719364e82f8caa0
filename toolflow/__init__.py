"""toolflow - typed multi-step tool pipelines.

Run an ordered list of steps against a tool/API provider, threading the
typed output of earlier steps into the typed input of later ones.

    from toolflow.runtime import FlowEngine, StepDefinition, StubToolService
    from toolflow.tools import ImageGenerationInput, builtin_registry

    service = StubToolService({"generate_image": {"id": "img_1"}})
    engine = FlowEngine(service, builtin_registry())
    state = engine.run([StepDefinition.fixed("generate", ImageGenerationInput(prompt="a lighthouse"))])
    state.get("generate").output.id  # "img_1"
"""

__version__ = "0.1.0"
