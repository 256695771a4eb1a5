"""
单元测试用于测试 agent/executor.py 模块

测试覆盖：
- 完整的 run：工具调用 → 观察结果 → 最终答案
- 迭代预算 / 时间预算耗尽后的 force 与 generate 提前停止
- 取消令牌与超时：统一走 force
- 工具失败与未知工具转换为 observation
- 并行工具调用保持提出顺序
- 回调事件顺序
"""

import asyncio

import pytest
from langchain_core.messages import AIMessage

from agentcore.agent.errors import BackendError, DecisionCancelledError, ToolValidationError
from agentcore.agent.executor import AgentExecutor
from agentcore.agent.prompts import FORCE_STOP_MESSAGE
from agentcore.agent.types import (
    AgentConfig,
    EarlyStopStrategy,
    FinishResult,
    Unstructured,
)

SEARCH_CATS = "need info\nAction: search\nAction Input: cats"


def tool_calls(*calls: tuple[str, dict, str]) -> AIMessage:
    return AIMessage(
        content="",
        tool_calls=[
            {"name": name, "args": args, "id": call_id, "type": "tool_call"}
            for name, args, call_id in calls
        ],
    )


class EventRecorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [e.type for e in self.events]


# ======================================================================
# 正常完成
# ======================================================================


class TestRun:
    """测试正常完成的 run"""

    @pytest.mark.asyncio
    async def test_search_then_finish(self, react_agent_factory, tools):
        agent = react_agent_factory(
            [SEARCH_CATS, "Thought: nothing\nFinal Answer: No results found."]
        )
        recorder = EventRecorder()
        executor = AgentExecutor(agent, tools, callbacks=[recorder])

        result = await executor.run("Tell me about cats")

        assert result.return_value == Unstructured("No results found.")
        assert agent.chain.call_count == 2
        # The second request carries the observation of the first action
        second_scratchpad = agent.chain.inputs[1].scratchpad.content
        assert "Observation: no results" in second_scratchpad
        assert recorder.kinds == ["action_start", "action_end", "agent_finish"]
        assert recorder.events[0].action.observation is None
        assert recorder.events[1].action.observation == "no results"
        assert recorder.events[2].result == result

    @pytest.mark.asyncio
    async def test_finish_on_first_step(self, react_agent_factory, tools):
        agent = react_agent_factory(["Final Answer: hello"])
        result = await AgentExecutor(agent, tools).run("say hello")
        assert result.text == "hello"

    @pytest.mark.asyncio
    async def test_thought_consumes_an_iteration(self, react_agent_factory, tools):
        agent = react_agent_factory(["let me think", "Final Answer: ok"])
        result = await AgentExecutor(agent, tools).run("task")
        assert result.text == "ok"
        assert agent.chain.call_count == 2
        assert agent.chain.inputs[1].scratchpad.content == ""

    @pytest.mark.asyncio
    async def test_tool_failure_becomes_observation(self, react_agent_factory, tools):
        agent = react_agent_factory(
            ["Action: broken\nAction Input: x", "Final Answer: gave up"]
        )
        recorder = EventRecorder()

        result = await AgentExecutor(agent, tools, callbacks=[recorder]).run("task")

        assert result.text == "gave up"
        assert recorder.events[1].action.observation == "Error: service unavailable"

    @pytest.mark.asyncio
    async def test_unknown_tool_becomes_observation(self, react_agent_factory, tools):
        agent = react_agent_factory(
            ["Action: teleport\nAction Input: mars", "Final Answer: cannot"]
        )
        recorder = EventRecorder()

        await AgentExecutor(agent, tools, callbacks=[recorder]).run("task")

        observation = recorder.events[1].action.observation
        assert observation.startswith("Error: teleport is not a valid tool")
        assert "search" in observation

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self, react_agent_factory, tools):
        agent = react_agent_factory([SEARCH_CATS, BackendError("503")])
        recorder = EventRecorder()

        with pytest.raises(BackendError):
            await AgentExecutor(agent, tools, callbacks=[recorder]).run("task")

        assert "agent_finish" not in recorder.kinds

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_break_run(self, react_agent_factory, tools):
        agent = react_agent_factory([SEARCH_CATS, "Final Answer: done"])

        def explode(event):
            raise RuntimeError("observer bug")

        result = await AgentExecutor(agent, tools, callbacks=[explode]).run("task")
        assert result.text == "done"

    def test_invalid_tools_are_rejected(self, react_agent_factory, tools):
        with pytest.raises(ToolValidationError):
            AgentExecutor(react_agent_factory([]), [*tools, tools[0]])

    def test_executor_tools_must_match_agent_tools(self, react_agent_factory, tools):
        """测试执行器的工具必须与 agent 提示词中的工具一致"""
        agent = react_agent_factory([])
        with pytest.raises(ToolValidationError) as exc_info:
            AgentExecutor(agent, tools[:1])
        assert "calculator" in str(exc_info.value)


# ======================================================================
# 预算耗尽
# ======================================================================


class TestBudget:
    """测试预算耗尽后的提前停止"""

    @pytest.mark.asyncio
    async def test_force_after_iteration_limit(self, react_agent_factory, tools):
        agent = react_agent_factory([SEARCH_CATS] * 5)
        recorder = EventRecorder()
        config = AgentConfig(max_iterations=5)

        result = await AgentExecutor(agent, tools, config, [recorder]).run("task")

        assert result == FinishResult.unstructured(FORCE_STOP_MESSAGE, log="")
        assert agent.chain.call_count == 5
        assert recorder.kinds == ["action_start", "action_end"] * 5 + ["agent_finish"]

    @pytest.mark.asyncio
    async def test_generate_after_iteration_limit(self, react_agent_factory, tools):
        raw = "Cats like boxes."
        agent = react_agent_factory([SEARCH_CATS, SEARCH_CATS, raw])
        config = AgentConfig(
            max_iterations=2, early_stopping_method=EarlyStopStrategy.GENERATE
        )

        result = await AgentExecutor(agent, tools, config).run("task")

        assert result == FinishResult.unstructured(raw, log=raw)
        assert agent.chain.call_count == 3
        final_request = agent.chain.inputs[2]
        assert final_request.scratchpad == agent.construct_final_scratchpad(
            [
                action.with_observation("no results")
                for action in agent.parse_output(AIMessage(content=SEARCH_CATS)).actions
            ]
            * 2
        )

    @pytest.mark.asyncio
    async def test_generate_finish_is_returned_as_is(self, react_agent_factory, tools):
        agent = react_agent_factory([SEARCH_CATS, "Final Answer: cats sleep a lot"])
        config = AgentConfig(
            max_iterations=1, early_stopping_method=EarlyStopStrategy.GENERATE
        )

        result = await AgentExecutor(agent, tools, config).run("task")

        assert result.return_value == Unstructured("cats sleep a lot")

    @pytest.mark.asyncio
    async def test_time_budget(self, react_agent_factory, tools, monkeypatch):
        agent = react_agent_factory([SEARCH_CATS] * 3)
        config = AgentConfig(max_iterations=None, max_execution_time=0.05)

        async def slow_tool(tool_map, action):
            await asyncio.sleep(0.1)
            return "slow"

        monkeypatch.setattr("agentcore.agent.executor.execute_tool", slow_tool)
        result = await AgentExecutor(agent, tools, config).run("task")

        assert result.text == FORCE_STOP_MESSAGE
        assert agent.chain.call_count == 1


# ======================================================================
# 取消与超时
# ======================================================================


class TestCancellation:
    """测试取消与超时统一走 force"""

    @pytest.mark.asyncio
    async def test_cancelled_decision_forces_result(self, react_agent_factory, tools):
        agent = react_agent_factory([SEARCH_CATS, DecisionCancelledError("cancelled")])
        config = AgentConfig(early_stopping_method=EarlyStopStrategy.GENERATE)

        result = await AgentExecutor(agent, tools, config).run("task")

        assert result.text == FORCE_STOP_MESSAGE
        # No retry and no extra generate call
        assert agent.chain.call_count == 2

    @pytest.mark.asyncio
    async def test_timeout_forces_result(self, react_agent_factory, tools):
        agent = react_agent_factory([DecisionCancelledError("timeout")])
        result = await AgentExecutor(agent, tools).run("task")
        assert result.text == FORCE_STOP_MESSAGE

    @pytest.mark.asyncio
    async def test_cancelled_generate_call_falls_back_to_force(
        self, react_agent_factory, tools
    ):
        agent = react_agent_factory([SEARCH_CATS, DecisionCancelledError("timeout")])
        config = AgentConfig(
            max_iterations=1, early_stopping_method=EarlyStopStrategy.GENERATE
        )

        result = await AgentExecutor(agent, tools, config).run("task")

        assert result.text == FORCE_STOP_MESSAGE
        assert agent.chain.call_count == 2

    @pytest.mark.asyncio
    async def test_request_timeout_is_passed_to_backend(self, react_agent_factory, tools):
        agent = react_agent_factory(["Final Answer: ok"])
        config = AgentConfig(request_timeout=3.0)
        await AgentExecutor(agent, tools, config).run("task")
        assert agent.chain.timeouts == [3.0]


# ======================================================================
# 并行工具调用
# ======================================================================


class TestParallelTools:
    """测试一个批次内的并行工具调用"""

    @pytest.mark.asyncio
    async def test_batch_results_keep_proposal_order(
        self, tool_calling_agent_factory, tools
    ):
        agent = tool_calling_agent_factory(
            [
                tool_calls(
                    ("search", {"query": "cats"}, "c1"),
                    ("calculator", {"expression": "2 + 3"}, "c2"),
                    ("broken", {"query": "x"}, "c3"),
                ),
                AIMessage(content="All done."),
            ]
        )
        recorder = EventRecorder()
        config = AgentConfig(parallel_tool_calls=True)

        result = await AgentExecutor(agent, tools, config, [recorder]).run("task")

        assert result.text == "All done."
        assert recorder.kinds == ["action_start"] * 3 + ["action_end"] * 3 + [
            "agent_finish"
        ]
        ended = [e.action for e in recorder.events if e.type == "action_end"]
        assert [a.call_id for a in ended] == ["c1", "c2", "c3"]
        assert [a.observation for a in ended] == [
            "no results",
            "5",
            "Error: service unavailable",
        ]

        # The next request pairs each call with its own result
        messages = agent.chain.inputs[1].scratchpad.content
        tool_results = [(m.tool_call_id, m.content) for m in messages[1::2]]
        assert tool_results == [
            ("c1", "no results"),
            ("c2", "5"),
            ("c3", "Error: service unavailable"),
        ]

    @pytest.mark.asyncio
    async def test_sequential_batch_interleaves_events(
        self, tool_calling_agent_factory, tools
    ):
        agent = tool_calling_agent_factory(
            [
                tool_calls(
                    ("search", {"query": "cats"}, "c1"),
                    ("calculator", {"expression": "1 + 1"}, "c2"),
                ),
                AIMessage(content="Done."),
            ]
        )
        recorder = EventRecorder()

        await AgentExecutor(agent, tools, callbacks=[recorder]).run("task")

        assert recorder.kinds == [
            "action_start",
            "action_end",
            "action_start",
            "action_end",
            "agent_finish",
        ]

    @pytest.mark.asyncio
    async def test_run_scoped_callbacks(self, react_agent_factory, tools):
        agent = react_agent_factory(["Final Answer: a", "Final Answer: b"])
        executor = AgentExecutor(agent, tools)
        first, second = EventRecorder(), EventRecorder()

        await executor.run("one", callbacks=[first])
        await executor.run("two", callbacks=[second])

        assert first.events[0].result.text == "a"
        assert second.events[0].result.text == "b"
        assert len(first.events) == len(second.events) == 1
