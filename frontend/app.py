import streamlit as st
import requests

# Page configuration
st.set_page_config(
    page_title="QuizHub",
    page_icon="🧠",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Configuration
API_BASE_URL = "http://localhost:8000/api"
QUESTION_COUNT_OPTIONS = [10, 20, 30, 40, 50]

# Initialize session state
if "user_id" not in st.session_state:
    st.session_state.user_id = "user_001"
if "quiz_state" not in st.session_state:
    st.session_state.quiz_state = "setup"
if "quiz_questions" not in st.session_state:
    st.session_state.quiz_questions = []
if "quiz_answers" not in st.session_state:
    st.session_state.quiz_answers = []
if "evaluation" not in st.session_state:
    st.session_state.evaluation = None
if "community_quiz" not in st.session_state:
    st.session_state.community_quiz = None
if "community_answers" not in st.session_state:
    st.session_state.community_answers = []
if "community_result" not in st.session_state:
    st.session_state.community_result = None

def main():
    st.title("🧠 QuizHub")

    with st.sidebar:
        st.header("📍 Navigate")
        page = st.radio(
            "Go to:",
            ["Categories", "Quiz Maker", "Community Quizzes", "Create Quiz", "Admin"],
            key="page_selector"
        )
        st.text_input("Your user id", key="user_id")

    if page == "Categories":
        show_categories_page()
    elif page == "Quiz Maker":
        show_quiz_maker_page()
    elif page == "Community Quizzes":
        show_community_page()
    elif page == "Create Quiz":
        show_create_quiz_page()
    else:
        show_admin_page()

def api_get(path, **params):
    """GET from the API; returns parsed JSON or None after showing the error"""
    try:
        response = requests.get(f"{API_BASE_URL}{path}", params=params or None)
        if response.status_code == 200:
            return response.json()
        st.error(f"Request failed: {response.json().get('detail', response.status_code)}")
    except Exception as e:
        st.error(f"Error connecting to API: {str(e)}")
    return None

def api_send(method, path, data=None):
    try:
        response = requests.request(method, f"{API_BASE_URL}{path}", json=data)
        if response.status_code == 200:
            return response.json()
        detail = response.json().get("detail", "Unknown error")
        st.error(f"Error: {detail}")
    except Exception as e:
        st.error(f"Connection error: {str(e)}")
    return None

def show_categories_page():
    """Browse approved questions by category"""
    st.header("📚 Categories")

    data = api_get("/categories")
    if not data:
        return

    categories = data["categories"]
    if not categories:
        st.info("No categories yet.")
        return

    columns = st.columns(3)
    for index, category in enumerate(categories):
        with columns[index % 3]:
            st.subheader(f"{category.get('icon') or '📚'} {category['name']}")
            st.caption(category.get("description") or "")
            st.metric("Questions", category.get("total_questions", 0))

    selected = st.selectbox(
        "Browse a category:",
        options=[category["slug"] for category in categories],
        format_func=lambda slug: next(c["name"] for c in categories if c["slug"] == slug)
    )
    search = st.text_input("Search questions...")

    result = api_get(f"/categories/{selected}/questions", search=search) if search else api_get(f"/categories/{selected}/questions")
    if not result:
        return

    if not result["questions"]:
        st.info("No questions match your search." if search else "No approved questions in this category yet.")

    for question in result["questions"]:
        with st.expander(question["question"]):
            st.write(f"**Answer:** {question['answer']}")
            st.caption(f"Difficulty: {question.get('difficulty_level', 'medium')}")
            if question.get("image_url"):
                st.image(question["image_url"])

def show_quiz_maker_page():
    """Random quiz across categories, graded by the configured AI service"""
    st.header("🎯 Quiz Maker")
    state = st.session_state.quiz_state

    if state == "setup":
        categories = api_get("/quiz-maker/categories") or []
        if not categories:
            st.warning("No categories available")
            return

        selected = []
        for category in categories:
            label = f"{category['icon']} {category['name']} ({category['total_questions']} questions)"
            if st.checkbox(label, key=f"cat_{category['id']}"):
                selected.append(category["id"])

        count = st.selectbox("Number of questions:", QUESTION_COUNT_OPTIONS, index=1)

        if st.button("▶️ Start Quiz", type="primary"):
            if not selected:
                st.error("Please select at least one category")
                return
            start_quiz(selected, count)

    elif state == "playing":
        show_quiz_question()

    elif state == "finished":
        show_quiz_results()

def start_quiz(category_ids, count):
    result = api_send("POST", "/quiz-maker/questions", {"category_ids": category_ids, "count": count})
    if not result:
        return

    if result["available"] < result["requested"]:
        st.warning(f"Only {result['available']} questions available for selected categories")

    st.session_state.quiz_questions = result["questions"]
    st.session_state.quiz_answers = []
    st.session_state.evaluation = None
    st.session_state.quiz_state = "playing"
    st.rerun()

def show_quiz_question():
    questions = st.session_state.quiz_questions
    index = len(st.session_state.quiz_answers)
    question = questions[index]

    st.progress((index + 1) / len(questions))
    st.caption(f"Question {index + 1} of {len(questions)}")
    st.subheader(question["question"])
    if question.get("image_url"):
        st.image(question["image_url"])

    with st.form(key=f"answer_{index}", clear_on_submit=True):
        answer = st.text_input("Your answer")
        submitted = st.form_submit_button("Submit Answer")

    if submitted:
        st.session_state.quiz_answers.append({
            "question": question["question"],
            "correct_answer": question["answer"],
            "user_answer": answer.strip(),
        })

        if len(st.session_state.quiz_answers) == len(questions):
            evaluate_quiz()
        else:
            st.rerun()

def evaluate_quiz():
    with st.spinner("Evaluating your answers..."):
        result = api_send("POST", "/quiz/evaluate", {"answers": st.session_state.quiz_answers})

    if result:
        st.session_state.evaluation = result
        st.session_state.quiz_state = "finished"
    else:
        # Resubmitting the last answer retries the evaluation
        st.session_state.quiz_answers.pop()
    st.rerun()

def show_quiz_results():
    evaluation = st.session_state.evaluation

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Score", f"{evaluation['correct_count']}/{evaluation['total']}")
    with col2:
        st.metric("Percentage", f"{evaluation['score_percentage']}%")
    with col3:
        st.caption(f"Graded by {evaluation['service']} · {evaluation['model']}")

    for index, verdict in enumerate(evaluation["results"], start=1):
        icon = "✅" if verdict["result"] == "Correct" else "❌"
        with st.expander(f"{icon} {index}. {verdict['question']}"):
            st.write(f"**Your answer:** {verdict['user_answer'] or '(empty)'}")
            st.write(f"**Correct answer:** {verdict['correct_answer']}")
            if verdict.get("justification"):
                st.info(verdict["justification"])

    with st.expander("🔍 Raw AI response"):
        st.code(evaluation.get("raw_response", ""))

    if st.button("🔄 New Quiz"):
        st.session_state.quiz_state = "setup"
        st.session_state.quiz_questions = []
        st.session_state.quiz_answers = []
        st.session_state.evaluation = None
        st.rerun()

def show_community_page():
    st.header("👥 Community Quizzes")

    if st.session_state.community_quiz:
        show_community_quiz()
        return

    data = api_get("/community-quizzes")
    if not data:
        return

    quizzes = data["quizzes"]
    if not quizzes:
        st.info("No community quizzes yet. Be the first to create one!")
        return

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Quizzes", len(quizzes))
    with col2:
        st.metric("Total Plays", sum(quiz["play_count"] for quiz in quizzes))

    for quiz in quizzes:
        rating = f"{quiz['average_rating']:.1f}" if quiz["average_rating"] > 0 else "New"
        with st.expander(f"📝 {quiz['title']} · ⭐ {rating} · {quiz['play_count']} plays"):
            st.write(quiz.get("description") or "")
            if quiz.get("tags"):
                st.caption(" ".join(f"#{tag}" for tag in quiz["tags"]))
            st.write(f"**Questions:** {len(quiz['questions'])}")
            if st.button("Play", key=f"play_{quiz['id']}"):
                st.session_state.community_quiz = quiz
                st.session_state.community_answers = []
                st.session_state.community_result = None
                st.rerun()

def show_community_quiz():
    quiz = st.session_state.community_quiz
    questions = quiz["questions"]
    st.subheader(quiz["title"])

    if st.session_state.community_result:
        result = st.session_state.community_result
        st.metric("Score", f"{result['correct_count']}/{result['total']}")
        for item in result["results"]:
            icon = "✅" if item["is_correct"] else "❌"
            st.write(f"{icon} **{item['question']}**  \nYour answer: {item['user_answer'] or '(empty)'} · Correct answer: {item['correct_answer']}")

        rating = st.slider("Rate this quiz", 1, 5, 5)
        if st.button("⭐ Submit Rating"):
            if api_send("POST", f"/community-quizzes/{quiz['id']}/rating", {"rating": rating}):
                st.success("Thanks for rating!")

        if st.button("⬅️ Back to Community Quizzes"):
            st.session_state.community_quiz = None
            st.session_state.community_result = None
            st.rerun()
        return

    index = len(st.session_state.community_answers)
    question = questions[index]
    st.progress((index + 1) / len(questions))
    st.write(f"**{index + 1}. {question['question']}**")
    if question.get("image_url"):
        st.image(question["image_url"])

    with st.form(key=f"community_answer_{index}", clear_on_submit=True):
        answer = st.text_input("Type your answer here...")
        submitted = st.form_submit_button("Submit Answer")

    if submitted:
        st.session_state.community_answers.append(answer.strip())
        if len(st.session_state.community_answers) == len(questions):
            st.session_state.community_result = api_send(
                "POST",
                f"/community-quizzes/{quiz['id']}/results",
                {"answers": st.session_state.community_answers}
            )
        st.rerun()

def show_create_quiz_page():
    st.header("✍️ Create a Community Quiz")

    if "draft_question_count" not in st.session_state:
        st.session_state.draft_question_count = 3

    if st.button("➕ Add Question"):
        st.session_state.draft_question_count += 1

    with st.form("create_quiz"):
        title = st.text_input("Title")
        description = st.text_area("Description")
        tags = st.text_input("Tags (comma separated)")

        questions = []
        for index in range(st.session_state.draft_question_count):
            st.markdown(f"**Question {index + 1}**")
            question = st.text_input("Question", key=f"draft_q_{index}")
            answer = st.text_input("Answer", key=f"draft_a_{index}")
            image_url = st.text_input("Image URL (optional)", key=f"draft_i_{index}")
            if question.strip() and answer.strip():
                questions.append({
                    "question": question.strip(),
                    "answer": answer.strip(),
                    "image_url": image_url.strip() or None,
                })

        submitted = st.form_submit_button("Submit for Review", type="primary")

    if submitted:
        if not title.strip():
            st.error("Please enter a title")
            return
        if not questions:
            st.error("Please add at least one question with an answer")
            return

        result = api_send("POST", "/community-quizzes", {
            "title": title.strip(),
            "description": description.strip() or None,
            "tags": [tag.strip() for tag in tags.split(",") if tag.strip()],
            "questions": questions,
            "author_id": st.session_state.user_id,
        })
        if result:
            st.success("✅ Quiz submitted! It will be visible once an admin approves it.")

def show_admin_page():
    st.header("🛠️ Admin")
    review_tab, users_tab, settings_tab = st.tabs(["Review", "Users", "AI Settings"])

    with review_tab:
        show_review_queue()
    with users_tab:
        show_user_management()
    with settings_tab:
        show_ai_settings()

def show_review_queue():
    pending = api_get("/admin/pending")
    if not pending:
        return

    notes = st.text_input("Review notes (optional)", key="review_notes")

    st.subheader(f"Pending Questions ({len(pending['questions'])})")
    for question in pending["questions"]:
        with st.expander(question["question"]):
            st.write(f"**Answer:** {question['answer']}")
            if question.get("category"):
                st.caption(f"Category: {question['category'].get('name')}")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Approve", key=f"approve_q_{question['id']}"):
                    review("questions", question["id"], "approved", notes)
            with col2:
                if st.button("Reject", key=f"reject_q_{question['id']}"):
                    review("questions", question["id"], "rejected", notes)

    st.subheader(f"Pending Quizzes ({len(pending['quizzes'])})")
    for quiz in pending["quizzes"]:
        with st.expander(quiz["title"]):
            st.write(quiz.get("description") or "")
            for item in quiz["questions"]:
                st.write(f"{item['order_index']}. {item['question']} → {item['answer']}")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Approve", key=f"approve_z_{quiz['id']}"):
                    review("quizzes", quiz["id"], "approved", notes)
            with col2:
                if st.button("Reject", key=f"reject_z_{quiz['id']}"):
                    review("quizzes", quiz["id"], "rejected", notes)

def review(kind, item_id, status, notes):
    result = api_send("POST", f"/admin/{kind}/{item_id}/review", {
        "status": status,
        "reviewer_id": st.session_state.user_id,
        "notes": notes or None,
    })
    if result:
        st.success(f"Marked {status}")
        st.rerun()

def show_user_management():
    users = api_get("/admin/users") or []
    for user in users:
        with st.expander(f"{user.get('full_name') or user['email']} ({user['role']})"):
            roles = ["user", "contributor", "admin"]
            role = st.selectbox("Role", roles, index=roles.index(user["role"]), key=f"role_{user['id']}")
            privileged = st.checkbox("Privileged", value=user["is_privileged"], key=f"priv_{user['id']}")
            if st.button("Save", key=f"save_user_{user['id']}"):
                if api_send("PUT", f"/admin/users/{user['id']}/privileges", {"is_privileged": privileged, "role": role}):
                    st.success("Privileges updated")

def show_ai_settings():
    settings = api_get("/admin/ai-settings")
    if not settings:
        return

    services = ["openai", "gemini"]
    service = st.radio(
        "Grading service",
        services,
        index=services.index(settings["current_service"]),
        horizontal=True
    )

    models = dict(settings["models"])
    prompts = dict(settings["prompts"])
    models[service] = st.text_input(f"{service} model", value=models[service])
    prompts[service] = st.text_area(
        f"{service} prompt (must contain {{QUESTIONS_PLACEHOLDER}})",
        value=prompts[service],
        height=400
    )

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("💾 Save Settings", type="primary"):
            saved = api_send("PUT", "/admin/ai-settings", {
                "current_service": service,
                "prompts": prompts,
                "models": models,
            })
            if saved:
                st.success("Settings saved")
    with col2:
        if st.button("↩️ Reset to Defaults"):
            if api_send("POST", "/admin/ai-settings/reset"):
                st.success("Settings reset")
                st.rerun()
    with col3:
        if st.button("🧪 Test Current Service"):
            with st.spinner("Calling AI service..."):
                result = api_send("POST", "/admin/ai-settings/test")
            if result:
                if result["success"]:
                    st.success("Service responded")
                else:
                    st.error("Service test failed")
                st.json(result["data"])

if __name__ == "__main__":
    main()
