"""Tests for call-site dispatch: callee contexts, dispositions and invalidation."""

import io

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from dexspectre.analysis.mutability import MutabilityOracle
from dexspectre.catalog import ClassCatalog, ClassDef
from dexspectre.core.context import ExecutionContext, create_initial_context
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import MethodReference, is_wide
from dexspectre.core.values import UNRESOLVED_TYPE, UnknownOrigin
from dexspectre.emulate.registry import EmulatedMethod, EmulationRegistry
from dexspectre.execution.instructions import InvalidInstructionError, InvokeInstruction
from dexspectre.execution.invocation import (
    Disposition,
    InvocationDispatcher,
    build_callee_context,
)
from dexspectre.logging import DexSpectreLogger, LogLevel

TOKEN = "Lcom/example/Token;"
BOX = "Lcom/example/Box;"
STRING = "Ljava/lang/String;"


def ref(descriptor):
    return MethodReference.from_descriptor(descriptor)


def caller(register_count=8, depth=5):
    return ExecutionContext(register_count=register_count, remaining_call_depth=depth)


class LogCall(EmulatedMethod):
    descriptor = "Lcom/example/Log;->log(Lcom/example/Box;)V"

    def compute(self, box):
        return None


class TestCalleeContext:
    def test_static_call_binds_declared_types(self):
        ctx = caller()
        ctx.add_register(3, "I", 10, 0)
        ctx.add_register(4, "Ljava/lang/Object;", "text", 0)
        ctx.add_register(5, "Z", True, 0)
        method = ref("Lcom/example/Util;->mix(ILjava/lang/String;Z)V")
        instr = InvokeInstruction.from_registers("invoke-static", method, 3, 4, 5)
        callee = build_callee_context(ctx, instr, method, 1)
        assert callee.register_count == 3
        assert callee.parameter_start == 0
        assert callee.parameter_registers() == [
            (0, RegisterStore("I", 10)),
            (1, RegisterStore(STRING, "text")),
            (2, RegisterStore("Z", True)),
        ]

    def test_instance_store_is_passed_unchanged(self):
        ctx = caller()
        instance = RegisterStore(BOX, "box-1")
        ctx.set_register(0, instance, 0)
        ctx.add_register(1, "I", 4, 0)
        method = ref("Lcom/example/Base;->put(I)V")
        instr = InvokeInstruction.from_registers("invoke-virtual", method, 0, 1)
        callee = build_callee_context(ctx, instr, method, 2)
        assert callee.get_register(0, 0) is instance
        assert callee.get_register(1, 0) == RegisterStore("I", 4)

    def test_values_are_read_at_program_point(self):
        ctx = caller()
        ctx.add_register(2, "I", 1, 0)
        ctx.add_register(2, "I", 2, 6)
        method = ref("Lcom/example/Util;->f(I)V")
        instr = InvokeInstruction.from_registers("invoke-static", method, 2)
        assert build_callee_context(ctx, instr, method, 5).get_register_value(0, 0) == 1
        assert build_callee_context(ctx, instr, method, 6).get_register_value(0, 0) == 2

    def test_wide_parameter_fills_register_pair(self):
        ctx = caller()
        ctx.add_register(0, "J", 2**40, 0)
        ctx.add_register(1, "J", 2**40, 0)
        ctx.add_register(2, "I", 3, 0)
        method = ref("Lcom/example/Util;->g(JI)V")
        instr = InvokeInstruction.from_range("invoke-static", method, start=0, count=3)
        callee = build_callee_context(ctx, instr, method, 1)
        assert [store.type for _, store in callee.parameter_registers()] == ["J", "J", "I"]
        assert callee.get_register_value(1, 0) == 2**40

    def test_call_depth_is_decremented(self):
        method = ref("Lcom/example/Util;->h()V")
        instr = InvokeInstruction.from_registers("invoke-static", method)
        assert build_callee_context(caller(depth=5), instr, method, 0).remaining_call_depth == 4

    def test_exhausted_budget_is_floored(self):
        method = ref("Lcom/example/Util;->h()V")
        instr = InvokeInstruction.from_registers("invoke-static", method)
        assert build_callee_context(caller(depth=0), instr, method, 0).remaining_call_depth == 0

    def test_register_count_must_match_signature(self):
        method = ref("Lcom/example/Util;->f(II)V")
        instr = InvokeInstruction.from_registers("invoke-static", method, 0)
        with pytest.raises(InvalidInstructionError):
            build_callee_context(caller(), instr, method, 0)


class TestEmulatedCalls:
    def test_default_context_allows_emulation(self, invoker):
        ctx = ExecutionContext(register_count=2)
        ctx.add_register(0, STRING, "hello", 0)
        instr = InvokeInstruction.from_registers("invoke-virtual", ref("Ljava/lang/String;->length()I"), 0)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.disposition is Disposition.EMULATED
        assert not outcome.depth_exhausted
        assert ctx.get_result_register() == RegisterStore("I", 5)

    def test_result_register_receives_emulated_store(self, invoker):
        ctx = caller()
        ctx.add_register(0, STRING, "hello", 0)
        instr = InvokeInstruction.from_registers("invoke-virtual", ref("Ljava/lang/String;->length()I"), 0)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.disposition is Disposition.EMULATED
        assert ctx.get_result_register() == RegisterStore("I", 5)
        assert outcome.result == RegisterStore("I", 5)
        assert outcome.callee.get_return_register() == RegisterStore("I", 5)

    def test_void_emulation_leaves_result_register(self, catalog, logger):
        invoker = InvocationDispatcher(catalog, emulator=EmulationRegistry([LogCall()]), logger=logger)
        ctx = caller()
        previous = RegisterStore("I", 99)
        ctx.set_result_register(previous)
        ctx.add_register(0, BOX, "box", 0)
        instr = InvokeInstruction.from_registers("invoke-static", ref(LogCall.descriptor), 0)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.disposition is Disposition.EMULATED
        assert ctx.get_result_register() is previous
        assert ctx.get_register_value(0, 1) == "box"
        assert outcome.invalidated == []

    def test_emulation_can_be_disabled(self, catalog, logger):
        invoker = InvocationDispatcher(catalog, logger=logger, emulation_enabled=False)
        ctx = caller()
        ctx.add_register(0, STRING, "hello", 0)
        instr = InvokeInstruction.from_registers("invoke-virtual", ref("Ljava/lang/String;->length()I"), 0)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.disposition is Disposition.OPAQUE
        assert outcome.retained == [0]
        assert ctx.get_register_value(0, 1) == "hello"


class TestOpaqueCalls:
    def test_call_at_first_instruction_keeps_parameter_binding(self, invoker):
        ctx = create_initial_context(register_count=3, parameter_types=[BOX], values=["box"])
        method = ref("Lcom/other/Sink;->fill(Lcom/example/Box;)V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 2), 0)
        assert outcome.invalidated == [2]
        assert not ctx.get_register(2, 0).is_known
        assert ctx.parameter_registers() == [(2, RegisterStore(BOX, "box"))]

    def test_unknown_result(self, invoker):
        ctx = caller()
        instr = InvokeInstruction.from_registers("invoke-static", ref("Lcom/other/Api;->get()I"))
        outcome = invoker.execute(ctx, instr, 3)
        assert outcome.disposition is Disposition.OPAQUE
        result = ctx.get_result_register()
        assert result.type == UNRESOLVED_TYPE
        assert result.value.origin is UnknownOrigin.INVALIDATED

    def test_void_result_register_untouched(self, invoker):
        ctx = caller()
        instr = InvokeInstruction.from_registers("invoke-static", ref("Lcom/other/Api;->run()V"))
        invoker.execute(ctx, instr, 3)
        assert ctx.get_result_register() is None

    def test_final_parameter_retained_and_mutable_invalidated(self, invoker):
        ctx = caller()
        ctx.add_register(1, TOKEN, "token", 0)
        ctx.add_register(2, BOX, "box", 0)
        method = ref("Lcom/other/Sink;->take(Lcom/example/Token;Lcom/example/Box;)V")
        instr = InvokeInstruction.from_registers("invoke-static", method, 1, 2)
        outcome = invoker.execute(ctx, instr, 4)
        assert ctx.get_register(1, 4) == RegisterStore(TOKEN, "token")
        invalidated = ctx.get_register(2, 4)
        assert invalidated.type == BOX
        assert invalidated.value.is_invalidated
        assert invalidated.value.reason == method.descriptor
        assert outcome.retained == [1]
        assert outcome.invalidated == [2]

    def test_invalidation_happens_at_call_point(self, invoker):
        ctx = caller()
        ctx.add_register(2, BOX, "box", 0)
        method = ref("Lcom/other/Sink;->fill(Lcom/example/Box;)V")
        invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 2), 4)
        assert ctx.get_register_value(2, 3) == "box"
        assert not ctx.get_register(2, 4).is_known

    def test_invalidates_argument_registers_not_low_registers(self, invoker):
        ctx = caller()
        for register in range(6):
            ctx.add_register(register, BOX, f"box-{register}", 0)
        method = ref("Lcom/other/Sink;->pair(Lcom/example/Box;Lcom/example/Box;)V")
        instr = InvokeInstruction.from_registers("invoke-static", method, 3, 5)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.invalidated == [3, 5]
        assert ctx.get_register_value(0, 1) == "box-0"
        assert ctx.get_register_value(1, 1) == "box-1"
        assert not ctx.get_register(3, 1).is_known

    def test_declared_type_decides_mutability(self, invoker):
        ctx = caller()
        ctx.add_register(0, STRING, "immutable at runtime", 0)
        method = ref("Lcom/other/Sink;->accept(Ljava/lang/Object;)V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 0), 1)
        assert outcome.invalidated == [0]

    def test_instance_of_mutable_class_is_invalidated(self, invoker):
        ctx = caller()
        ctx.add_register(0, BOX, "box", 0)
        ctx.add_register(1, "I", 3, 0)
        method = ref("Lcom/example/Box;->resize(I)V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-virtual", method, 0, 1), 2)
        assert outcome.invalidated == [0]
        assert outcome.retained == [1]
        assert ctx.get_register_value(1, 2) == 3

    def test_unresolved_instance_type_is_retained(self, invoker):
        ctx = caller()
        method = ref("Lcom/other/Thing;->poke()V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-virtual", method, 7), 1)
        assert outcome.retained == [7]
        assert outcome.invalidated == []

    def test_unresolved_result_is_not_invalidated_again(self, invoker):
        ctx = caller()
        first = RegisterStore.unknown(UNRESOLVED_TYPE, "Lcom/other/Api;->get()Ljava/lang/Object;")
        ctx.set_register(0, first, 2)
        method = ref("Lcom/other/Thing;->poke()V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-virtual", method, 0), 3)
        assert outcome.retained == [0]
        assert ctx.get_register(0, 3) is first
        assert len(ctx.get_register_history(0)) == 1

    def test_diagnostics(self, invoker, logger):
        ctx = caller()
        ctx.add_register(1, TOKEN, "token", 0)
        ctx.add_register(2, BOX, "box", 0)
        method = ref("Lcom/other/Sink;->take(Lcom/example/Token;Lcom/example/Box;)V")
        invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 1, 2), 4)
        infos = logger.get_entries(level=LogLevel.INFO, category="invoke")
        assert len(infos) == 1
        assert method.descriptor in infos[0].message
        fines = [e.message for e in logger.get_entries(level=LogLevel.FINE, category="invoke")]
        assert any("v1" in m and "retaining value" in m for m in fines)
        assert any("v2" in m and "marking as unknown" in m for m in fines)
        assert logger.get_count("invokes") == 1


class TestPrimitiveParameters:
    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.sampled_from(sorted("ZBSCIJFD")), max_size=6))
    def test_never_invalidated(self, types):
        values = {"Z": True, "B": 1, "S": 2, "C": "c", "I": 3, "J": 4, "F": 0.5, "D": 1.5}
        ctx = caller(register_count=16)
        register = 0
        for param_type in types:
            for _ in range(2 if is_wide(param_type) else 1):
                ctx.add_register(register, param_type, values[param_type], 0)
                register += 1
        method = MethodReference("Lcom/other/Native;", "consume", tuple(types), "V")
        instr = InvokeInstruction.from_range("invoke-static", method, start=0, count=register)
        quiet = DexSpectreLogger(level=LogLevel.QUIET, color=False, stream=io.StringIO())
        invoker = InvocationDispatcher(ClassCatalog(), logger=quiet)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.invalidated == []
        for r in range(register):
            assert ctx.get_register(r, 1) == ctx.get_register(r, 0)

    def test_primitives_retained_even_if_catalog_names_them(self, logger):
        # A catalog cannot make a primitive mutable.
        catalog = ClassCatalog([ClassDef("I")])
        invoker = InvocationDispatcher(catalog, oracle=MutabilityOracle(catalog, logger=logger), logger=logger)
        ctx = caller()
        ctx.add_register(0, "I", 1, 0)
        method = ref("Lcom/other/Api;->f(I)V")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 0), 1)
        assert outcome.retained == [0]


class TestDeferredKnownCalls:
    def test_catalog_method_is_deferred(self, invoker, logger):
        ctx = caller()
        ctx.add_register(0, BOX, "box", 0)
        ctx.add_register(1, "I", 2, 0)
        method = ref("Lcom/example/Helper;->transform(Lcom/example/Box;I)I")
        outcome = invoker.execute(ctx, InvokeInstruction.from_registers("invoke-static", method, 0, 1), 3)
        assert outcome.disposition is Disposition.DEFERRED_KNOWN
        warnings = logger.get_entries(level=LogLevel.WARNING, category="invoke")
        assert "holding off on executing it" in warnings[0].message

    def test_same_effects_as_opaque(self, catalog, logger):
        descriptor = "Lcom/example/Helper;->transform(Lcom/example/Box;I)I"
        deferred = InvocationDispatcher(catalog, logger=logger)
        opaque = InvocationDispatcher(ClassCatalog(list(catalog)[:2]), logger=logger)
        results = []
        for invoker in (deferred, opaque):
            ctx = caller()
            ctx.add_register(0, BOX, "box", 0)
            ctx.add_register(1, "I", 2, 0)
            instr = InvokeInstruction.from_registers("invoke-static", ref(descriptor), 0, 1)
            outcome = invoker.execute(ctx, instr, 3)
            results.append((outcome, ctx.snapshot(3), ctx.get_result_register()))
        (d, d_regs, d_result), (o, o_regs, o_result) = results
        assert d.disposition is Disposition.DEFERRED_KNOWN
        assert o.disposition is Disposition.OPAQUE
        assert d_regs == o_regs
        assert d_result == o_result
        assert d.invalidated == o.invalidated == [0]


class TestCallDepth:
    def test_exhausted_budget_forces_opaque(self, invoker, logger):
        ctx = caller(depth=0)
        ctx.add_register(0, STRING, "hello", 0)
        instr = InvokeInstruction.from_registers("invoke-virtual", ref("Ljava/lang/String;->length()I"), 0)
        outcome = invoker.execute(ctx, instr, 1)
        assert outcome.disposition is Disposition.OPAQUE
        assert outcome.depth_exhausted
        assert outcome.callee.remaining_call_depth == 0
        assert not ctx.get_result_register().is_known
        warnings = logger.get_entries(level=LogLevel.WARNING, category="invoke")
        assert "Call depth exhausted" in warnings[0].message

    def test_callee_budget_is_one_less(self, invoker):
        ctx = caller(depth=3)
        instr = InvokeInstruction.from_registers("invoke-static", ref("Lcom/other/Api;->run()V"))
        assert invoker.execute(ctx, instr, 0).callee.remaining_call_depth == 2


class TestIdempotence:
    def test_repeated_dispatch_is_stable(self, invoker):
        ctx = caller()
        ctx.add_register(0, BOX, "box", 0)
        ctx.add_register(1, TOKEN, "token", 0)
        ctx.add_register(2, "I", 5, 0)
        method = ref("Lcom/other/Sink;->all(Lcom/example/Box;Lcom/example/Token;I)Z")
        instr = InvokeInstruction.from_registers("invoke-static", method, 0, 1, 2)
        first_ctx, second_ctx = ctx.fork(), ctx.fork()
        first = invoker.execute(first_ctx, instr, 1)
        second = invoker.execute(second_ctx, instr, 1)
        assert first.disposition is second.disposition
        assert first.invalidated == second.invalidated == [0]
        assert first_ctx.snapshot(1) == second_ctx.snapshot(1)
        again = invoker.execute(first_ctx, instr, 1)
        assert again.invalidated == first.invalidated
        assert again.disposition is first.disposition
