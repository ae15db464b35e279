"""FastAPI server that exposes the active assessment to a browser."""

from __future__ import annotations

import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel
import uvicorn

from assessment_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from assessment_app.core.assessment_manager import AssessmentManager, SessionStatus
from assessment_app.core.markdown_math_renderer import renderer
from assessment_app.core.models import SessionResult, SessionState

logger = logging.getLogger(__name__)

_LEARNER_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>AssessQt</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none; }
      .header { display: flex; justify-content: space-between; align-items: center; }
      #countdown { font-size: 1.6rem; font-variant-numeric: tabular-nums; color: #facc15; }
      #countdown.warning { color: #ef4444; }
      .progress-track { width: 100%; height: 0.6rem; background: rgba(250, 204, 21, 0.25); border-radius: 999px; overflow: hidden; }
      #progress-fill { height: 100%; background: #22c55e; width: 0; transition: width 120ms linear; }
      #navigator { display: flex; flex-wrap: wrap; gap: 0.4rem; }
      .nav-button { width: 2.5rem; height: 2.5rem; border: none; border-radius: 0.5rem; background: #334155; color: #fff; cursor: pointer; }
      .nav-button.answered { background: #16a34a; }
      .question { margin-bottom: 1rem; }
      .option { display: block; padding: 0.6rem; border-radius: 0.5rem; background: #1e293b; margin: 0.3rem 0; cursor: pointer; }
      textarea { width: 100%; min-height: 5rem; border-radius: 0.5rem; padding: 0.5rem; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; }
      #status { min-height: 1.25rem; color: #fca5a5; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"></script>
  </head>
  <body>
    <section class="card" id="waiting-card">
      <h1>AssessQt</h1>
      <p id="waiting-message">Waiting for an assessment to be opened on the desktop app...</p>
    </section>
    <section class="card hidden" id="session-card">
      <div class="header">
        <h2 id="title"></h2>
        <span id="countdown">--:--</span>
      </div>
      <p id="progress-label"></p>
      <div class="progress-track"><div id="progress-fill"></div></div>
      <div id="navigator"></div>
    </section>
    <section class="card hidden" id="questions-card">
      <div id="questions"></div>
      <button id="submit-button" class="primary-button">Submit</button>
      <button id="resume-button" class="primary-button hidden">Back to Questions</button>
      <p id="status"></p>
    </section>
    <section class="card hidden" id="result-card">
      <h2>Result</h2>
      <p id="result-message"></p>
      <p id="result-score"></p>
      <p id="result-evaluation"></p>
    </section>
    <script>
      const byId = (id) => document.getElementById(id);
      let renderedAssignment = null;

      function setVisibility(element, isVisible) {
        element.classList.toggle('hidden', !isVisible);
      }

      async function postJson(url, body) {
        const response = await fetch(url, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        const data = await response.json();
        return { ok: response.ok, status: response.status, data };
      }

      async function recordAnswer(questionId, answer) {
        const reply = await postJson('/answer', { question_id: questionId, answer });
        if (!reply.ok) {
          byId('status').textContent = reply.data.detail || 'Answer not recorded.';
        }
      }

      async function loadQuestions() {
        const response = await fetch('/questions');
        if (!response.ok) return;
        const payload = await response.json();
        const container = byId('questions');
        container.innerHTML = '';
        payload.questions.forEach((question) => {
          const wrapper = document.createElement('div');
          wrapper.className = 'question';
          wrapper.id = `question-${question.number}`;
          wrapper.innerHTML = `<strong>${question.number}.</strong> ${question.html}`;
          const current = payload.answers[question.id] || '';
          if (question.options.length) {
            question.options.forEach((option) => {
              const label = document.createElement('label');
              label.className = 'option';
              const input = document.createElement('input');
              input.type = 'radio';
              input.name = `q-${question.id}`;
              input.checked = current === option.text;
              input.addEventListener('change', () => recordAnswer(question.id, option.text));
              label.appendChild(input);
              label.insertAdjacentHTML('beforeend', ` ${option.html}`);
              wrapper.appendChild(label);
            });
          } else {
            const area = document.createElement('textarea');
            area.value = current;
            area.placeholder = 'Type your answer here...';
            area.addEventListener('change', () => recordAnswer(question.id, area.value));
            wrapper.appendChild(area);
          }
          container.appendChild(wrapper);
        });
        if (window.MathJax && window.MathJax.typesetPromise) {
          window.MathJax.typesetPromise([container]);
        }
      }

      function renderStatus(status) {
        byId('title').textContent = status.title;
        byId('countdown').textContent = status.countdown;
        byId('countdown').classList.toggle('warning', status.remaining_seconds <= 60);
        byId('progress-label').textContent = `Answered: ${status.answered_count}/${status.total_questions}`;
        const percent = status.total_questions ? (status.answered_count / status.total_questions) * 100 : 0;
        byId('progress-fill').style.width = `${percent}%`;
        const navigator = byId('navigator');
        navigator.innerHTML = '';
        status.navigator.forEach((entry) => {
          const button = document.createElement('button');
          button.className = 'nav-button' + (entry.answered ? ' answered' : '');
          button.textContent = entry.index + 1;
          button.addEventListener('click', () => {
            byId(`question-${entry.index + 1}`)?.scrollIntoView({ behavior: 'smooth', block: 'center' });
          });
          navigator.appendChild(button);
        });
        const failed = status.state === 'SUBMIT_FAILED';
        byId('submit-button').textContent = failed ? 'Retry Submission' : 'Submit';
        byId('submit-button').disabled = !['IN_PROGRESS', 'SUBMIT_FAILED'].includes(status.state);
        setVisibility(byId('resume-button'), failed && !status.time_expired);
        byId('status').textContent = failed ? (status.error_message || 'Submission failed.') : '';
      }

      function renderResult(result) {
        byId('result-message').textContent = result.message;
        byId('result-score').textContent = `Score: ${result.score} (${result.correct_count}/${result.total} correct)`;
        byId('result-evaluation').textContent = result.evaluation_summary || 'Detailed feedback is unavailable for this attempt.';
      }

      async function refresh() {
        const response = await fetch('/session');
        if (!response.ok) {
          setVisibility(byId('waiting-card'), true);
          [byId('session-card'), byId('questions-card'), byId('result-card')].forEach((el) => setVisibility(el, false));
          renderedAssignment = null;
          return;
        }
        const status = await response.json();
        setVisibility(byId('waiting-card'), status.state === 'BLOCKED');
        if (status.state === 'BLOCKED') {
          byId('waiting-message').textContent = `This assessment cannot be started (${status.block_reason}).`;
          return;
        }
        setVisibility(byId('session-card'), true);
        renderStatus(status);
        const submitted = status.state === 'SUBMITTED';
        setVisibility(byId('questions-card'), !submitted);
        setVisibility(byId('result-card'), submitted);
        if (submitted && status.result) {
          renderResult(status.result);
        } else if (renderedAssignment !== status.assignment_id) {
          renderedAssignment = status.assignment_id;
          await loadQuestions();
        }
      }

      byId('submit-button').addEventListener('click', async () => {
        let reply = await postJson('/submit', { confirm_incomplete: false });
        if (reply.status === 409 && reply.data.detail && reply.data.detail.unanswered) {
          const remaining = reply.data.detail.unanswered;
          if (!window.confirm(`${remaining} question(s) are still unanswered. Submit anyway?`)) return;
          reply = await postJson('/submit', { confirm_incomplete: true });
        }
        await refresh();
      });

      byId('resume-button').addEventListener('click', async () => {
        await postJson('/resume');
        await refresh();
      });

      refresh();
      setInterval(refresh, 1000);
    </script>
  </body>
</html>
"""


class AnswerPayload(BaseModel):
    """Payload schema for recorded answers."""

    question_id: int
    answer: str


class SubmitPayload(BaseModel):
    """Payload schema for submissions; unanswered questions need confirmation."""

    confirm_incomplete: bool = False


def _result_to_dict(result: SessionResult) -> dict[str, object]:
    evaluation = result.evaluation
    return {
        "message": result.message,
        "is_auto_submitted": result.is_auto_submitted,
        "score": result.scoring.raw_score,
        "correct_count": result.scoring.correct_count,
        "total": result.scoring.total,
        "not_applicable": result.scoring.not_applicable,
        "is_late": result.attempt.is_late,
        "attempt_number": result.attempt.attempt_number,
        "per_question": [
            {"question_id": outcome.question_id, "is_correct": outcome.is_correct}
            for outcome in result.scoring.per_question
        ],
        "evaluation_summary": evaluation.summary if evaluation else None,
        "recommendations": list(evaluation.recommendations) if evaluation else [],
    }


def _status_to_dict(status: SessionStatus) -> dict[str, object]:
    return {
        "assignment_id": status.assignment_id,
        "title": status.title,
        "state": status.state.name,
        "remaining_seconds": status.remaining_seconds,
        "countdown": status.countdown,
        "answered_count": status.answered_count,
        "total_questions": status.total_questions,
        "navigator": [
            {"index": entry.index, "question_id": entry.question_id, "answered": entry.answered}
            for entry in status.navigator
        ],
        "block_reason": status.block_reason.value if status.block_reason else None,
        "last_error": status.last_error.value if status.last_error else None,
        "error_message": status.error_message,
        "time_expired": status.time_expired,
        "result": _result_to_dict(status.result) if status.result else None,
    }


def _get_manager_dependency(manager: AssessmentManager):
    def dependency() -> AssessmentManager:
        if not manager.has_active_session():
            raise HTTPException(status_code=404, detail="No assessment session is open.")
        return manager

    return dependency


def create_api_app(manager: AssessmentManager) -> FastAPI:
    """Create a FastAPI application wired to the provided assessment manager."""
    app = FastAPI(title="AssessQt API", version="0.1.0")
    session_manager = _get_manager_dependency(manager)

    @app.exception_handler(LookupError)
    async def session_closed_handler(request: Request, exc: LookupError) -> JSONResponse:
        # The session can be left from the desktop between the dependency check and the handler.
        logger.debug("Request to %s found no session: %s", request.url.path, exc)
        return JSONResponse(status_code=404, content={"detail": "No assessment session is open."})

    @app.get("/", response_class=HTMLResponse)
    def serve_learner_page() -> str:
        return _LEARNER_PAGE_HTML

    @app.get("/session")
    def get_session(current: AssessmentManager = Depends(session_manager)) -> dict[str, object]:
        return _status_to_dict(current.get_status())

    @app.get("/questions")
    def get_questions(current: AssessmentManager = Depends(session_manager)) -> dict[str, object]:
        questions = current.get_questions()
        answers = {
            str(question.id): current.get_answer(question.id)
            for question in questions
            if current.get_answer(question.id) is not None
        }
        return {
            "questions": [
                renderer.render_question(question, number=idx + 1)
                for idx, question in enumerate(questions)
            ],
            "answers": answers,
        }

    @app.post("/answer", status_code=201)
    def record_answer(
        payload: AnswerPayload,
        current: AssessmentManager = Depends(session_manager),
    ) -> dict[str, object]:
        try:
            recorded = current.record_answer(payload.question_id, payload.answer)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown question id {payload.question_id}.") from None
        if not recorded:
            raise HTTPException(status_code=409, detail="The assessment is not accepting answers.")
        status = current.get_status()
        return {"recorded": True, "answered_count": status.answered_count}

    @app.post("/submit")
    def submit(
        payload: SubmitPayload,
        current: AssessmentManager = Depends(session_manager),
    ) -> dict[str, object]:
        status = current.get_status()
        if status.state is SessionState.IN_PROGRESS and not payload.confirm_incomplete:
            unanswered = status.total_questions - status.answered_count
            if unanswered > 0:
                raise HTTPException(
                    status_code=409,
                    detail={"message": "Unanswered questions remain.", "unanswered": unanswered},
                )
        if not current.request_submit():
            raise HTTPException(status_code=409, detail=f"Cannot submit in state {status.state.name}.")
        logger.info("Submission requested from the web page")
        return _status_to_dict(current.get_status())

    @app.post("/resume")
    def resume(current: AssessmentManager = Depends(session_manager)) -> dict[str, object]:
        if not current.resume_session():
            raise HTTPException(status_code=409, detail="The session cannot be resumed.")
        return _status_to_dict(current.get_status())

    return app


def start_api_server(
    manager: AssessmentManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="AssessmentApiServer", daemon=True)
    thread.start()
    return thread
