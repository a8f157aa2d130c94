from pymongo import MongoClient
from typing import List, Dict, Any, Optional
import logging
import random
import re
import uuid
from datetime import datetime
from backend.config import Config

logger = logging.getLogger(__name__)

# Question sets that predate categories live in their own collections
LEGACY_QUIZ_CATEGORIES: List[Dict[str, Any]] = [
    {
        "id": "worldcup",
        "name": "World Cup Quiz",
        "description": "Test your knowledge about World Cup history, players, and memorable moments",
        "table": "wcquizz",
        "icon": "🏆",
        "color": "bg-green-500",
        "type": "legacy",
    },
]


class MongoDBClient:
    """
    MongoDB client for the quiz data store.

    Covers categories, approved and pending questions, community quizzes with their
    questions, users and the persisted AI settings document. Documents carry a string
    ``id``; Mongo's ``_id`` is only used as the id of legacy rows that lack one.
    Read failures are logged and produce empty results, write failures are logged
    and reported as False/None.
    """
    def __init__(self, client: Optional[MongoClient] = None):
        self.client = client or MongoClient(Config.MONGODB_URI)
        self.db = self.client[Config.DATABASE_NAME]
        self.categories = self.db[Config.CATEGORIES_COLLECTION]
        self.questions = self.db[Config.QUESTIONS_COLLECTION]
        self.user_quizzes = self.db[Config.USER_QUIZZES_COLLECTION]
        self.quiz_questions = self.db[Config.QUIZ_QUESTIONS_COLLECTION]
        self.users = self.db[Config.USERS_COLLECTION]
        self.settings = self.db[Config.SETTINGS_COLLECTION]
        self._ensure_indexes()

    def _ensure_indexes(self):
        """Ensure lookup indexes exist"""
        try:
            self.categories.create_index("slug", unique=True)
            self.questions.create_index([("category_id", 1), ("status", 1)])
            self.user_quizzes.create_index([("status", 1), ("is_public", 1)])
            self.quiz_questions.create_index([("quiz_id", 1), ("order_index", 1)])
        except Exception as e:
            logger.warning(f"Could not create indexes: {e}")

    def _question_pipeline(self, match: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Questions newest first, joined with their category and author"""
        return [
            {"$match": match},
            {"$sort": {"created_at": -1}},
            {"$lookup": {
                "from": Config.CATEGORIES_COLLECTION,
                "localField": "category_id",
                "foreignField": "id",
                "as": "category"
            }},
            {"$lookup": {
                "from": Config.USERS_COLLECTION,
                "localField": "author_id",
                "foreignField": "id",
                "as": "author"
            }},
            {"$unwind": {"path": "$category", "preserveNullAndEmptyArrays": True}},
            {"$unwind": {"path": "$author", "preserveNullAndEmptyArrays": True}},
            {"$project": {"_id": 0, "category._id": 0, "author._id": 0}},
        ]

    def _quiz_pipeline(self, match: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Community quizzes newest first, joined with author and ordered questions"""
        return [
            {"$match": match},
            {"$sort": {"created_at": -1}},
            {"$lookup": {
                "from": Config.USERS_COLLECTION,
                "localField": "author_id",
                "foreignField": "id",
                "as": "author"
            }},
            {"$lookup": {
                "from": Config.QUIZ_QUESTIONS_COLLECTION,
                "localField": "id",
                "foreignField": "quiz_id",
                "as": "questions"
            }},
            {"$unwind": {"path": "$author", "preserveNullAndEmptyArrays": True}},
            {"$project": {"_id": 0, "author._id": 0, "questions._id": 0}},
        ]

    @staticmethod
    def _with_rating(quiz: Dict[str, Any]) -> Dict[str, Any]:
        rating_count = quiz.get("rating_count", 0)
        quiz["average_rating"] = quiz.get("rating_sum", 0) / rating_count if rating_count > 0 else 0.0
        quiz["questions"] = sorted(quiz.get("questions", []), key=lambda q: q.get("order_index", 0))
        return quiz

    # Categories

    def get_main_categories(self) -> List[Dict[str, Any]]:
        """Active categories ordered by name."""
        try:
            cursor = self.categories.find({"is_active": True}, {"_id": 0}).sort("name", 1)
            return list(cursor)
        except Exception as e:
            logger.error(f"Error fetching categories: {e}")
            return []

    def get_main_categories_with_stats(self) -> List[Dict[str, Any]]:
        """
        Active categories with the number of approved questions in each.

        Returns:
            List[Dict[str, Any]]: Category documents with an added ``total_questions``
        """
        categories = self.get_main_categories()

        try:
            for category in categories:
                category["total_questions"] = self.questions.count_documents({
                    "category_id": category["id"],
                    "status": "approved"
                })
        except Exception as e:
            logger.error(f"Error counting category questions: {e}")

        return categories

    def get_category_by_slug(self, slug: str) -> Optional[Dict[str, Any]]:
        try:
            return self.categories.find_one({"slug": slug, "is_active": True}, {"_id": 0})
        except Exception as e:
            logger.error(f"Error fetching category {slug}: {e}")
            return None

    def get_all_categories_for_quiz_maker(self) -> List[Dict[str, Any]]:
        """
        Categories offered by the quiz maker: main categories followed by legacy sets.

        Returns:
            List[Dict[str, Any]]: Dictionaries in the QuizCategory shape with
                ``type`` set to "main" or "legacy"
        """
        quiz_categories = [
            {
                "id": category["id"],
                "name": category["name"],
                "description": category.get("description") or "",
                "table": Config.QUESTIONS_COLLECTION,
                "icon": category.get("icon") or "📚",
                "color": category.get("color") or "bg-blue-500",
                "total_questions": category.get("total_questions", 0),
                "type": "main",
            }
            for category in self.get_main_categories_with_stats()
        ]

        for legacy in LEGACY_QUIZ_CATEGORIES:
            try:
                total = self.db[legacy["table"]].count_documents({})
            except Exception as e:
                logger.error(f"Error counting legacy questions in {legacy['table']}: {e}")
                total = 0
            quiz_categories.append({**legacy, "total_questions": total})

        return quiz_categories

    # Questions

    def get_approved_questions_by_category(self, category_id: str) -> List[Dict[str, Any]]:
        try:
            return list(self.questions.aggregate(
                self._question_pipeline({"category_id": category_id, "status": "approved"})
            ))
        except Exception as e:
            logger.error(f"Error fetching questions for category {category_id}: {e}")
            return []

    def get_all_approved_questions(self) -> List[Dict[str, Any]]:
        try:
            return list(self.questions.aggregate(self._question_pipeline({"status": "approved"})))
        except Exception as e:
            logger.error(f"Error fetching approved questions: {e}")
            return []

    def search_approved_questions(self, query: str, category_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Case-insensitive substring search over question and answer text."""
        match: Dict[str, Any] = {"status": "approved"}
        if category_id:
            match["category_id"] = category_id
        if query:
            pattern = {"$regex": re.escape(query), "$options": "i"}
            match["$or"] = [{"question": pattern}, {"answer": pattern}]

        try:
            return list(self.questions.aggregate(self._question_pipeline(match)))
        except Exception as e:
            logger.error(f"Error searching questions: {e}")
            return []

    def _get_legacy_questions(self, legacy: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Legacy rows reshaped to look like main questions; rows without text are skipped."""
        try:
            rows = list(self.db[legacy["table"]].find({}))
        except Exception as e:
            logger.error(f"Error fetching legacy questions from {legacy['table']}: {e}")
            return []

        questions = []
        for row in rows:
            if not row.get("question") or not row.get("answer"):
                logger.warning(f"Skipping malformed legacy question in {legacy['table']}: {row.get('_id')}")
                continue

            questions.append({
                "id": str(row.get("id", row.get("_id"))),
                "question": row["question"],
                "answer": row["answer"],
                "image_url": row.get("image_url"),
                "created_at": row.get("created_at"),
                "category": {
                    "id": legacy["id"],
                    "name": legacy["name"],
                    "icon": legacy["icon"],
                    "slug": legacy["id"],
                },
                "difficulty_level": row.get("level") or "medium",
            })

        return questions

    def get_random_questions_from_categories(self, category_ids: List[str], count: int) -> List[Dict[str, Any]]:
        """
        Draw a random selection of questions across main and legacy categories.

        Args:
            category_ids (List[str]): Main category ids or legacy set ids
            count (int): Maximum number of questions to return

        Returns:
            List[Dict[str, Any]]: Shuffled questions, at most ``count`` of them
        """
        main_ids = {category["id"] for category in self.get_main_categories()}
        legacy_by_id = {legacy["id"]: legacy for legacy in LEGACY_QUIZ_CATEGORIES}
        all_questions: List[Dict[str, Any]] = []

        for category_id in category_ids:
            if category_id in main_ids:
                all_questions.extend(self.get_approved_questions_by_category(category_id))
            elif category_id in legacy_by_id:
                all_questions.extend(self._get_legacy_questions(legacy_by_id[category_id]))
            else:
                logger.warning(f"Unknown category requested by quiz maker: {category_id}")

        random.shuffle(all_questions)
        return all_questions[:count]

    def submit_question(self, question_data: Dict[str, Any]) -> Optional[str]:
        """Insert a contributed question awaiting review; returns its id."""
        now = datetime.now()
        document = {
            "id": str(uuid.uuid4()),
            "category_id": question_data["category_id"],
            "author_id": question_data["author_id"],
            "question": question_data["question"],
            "answer": question_data["answer"],
            "image_url": question_data.get("image_url") or None,
            "difficulty_level": question_data.get("difficulty_level", "medium"),
            "is_anonymous": question_data.get("is_anonymous", False),
            "is_reusable": question_data.get("is_reusable", True),
            "status": "pending",
            "reviewed_by": None,
            "reviewed_at": None,
            "review_notes": None,
            "created_at": now,
            "updated_at": now,
        }

        try:
            self.questions.insert_one(document)
            logger.info(f"Submitted question {document['id']} for review")
            return document["id"]
        except Exception as e:
            logger.error(f"Error submitting question: {e}")
            return None

    # Community quizzes

    def get_approved_community_quizzes(self) -> List[Dict[str, Any]]:
        try:
            quizzes = self.user_quizzes.aggregate(
                self._quiz_pipeline({"status": "approved", "is_public": True})
            )
            return [self._with_rating(quiz) for quiz in quizzes]
        except Exception as e:
            logger.error(f"Error fetching community quizzes: {e}")
            return []

    def get_community_quiz(self, quiz_id: str) -> Optional[Dict[str, Any]]:
        """Single approved quiz with its questions in order, or None."""
        try:
            quizzes = list(self.user_quizzes.aggregate(
                self._quiz_pipeline({"id": quiz_id, "status": "approved"})
            ))
            return self._with_rating(quizzes[0]) if quizzes else None
        except Exception as e:
            logger.error(f"Error fetching community quiz {quiz_id}: {e}")
            return None

    def submit_community_quiz(self, quiz_data: Dict[str, Any]) -> Optional[str]:
        """
        Insert a community quiz and its questions, pending review.

        Questions are numbered from 1 in submission order.
        """
        now = datetime.now()
        quiz_id = str(uuid.uuid4())
        quiz = {
            "id": quiz_id,
            "author_id": quiz_data["author_id"],
            "title": quiz_data["title"],
            "description": quiz_data.get("description") or None,
            "tags": quiz_data.get("tags", []),
            "is_public": True,
            "is_draft": False,
            "status": "pending",
            "reviewed_by": None,
            "reviewed_at": None,
            "review_notes": None,
            "play_count": 0,
            "rating_sum": 0,
            "rating_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        questions = [
            {
                "id": str(uuid.uuid4()),
                "quiz_id": quiz_id,
                "question": question["question"],
                "answer": question["answer"],
                "image_url": question.get("image_url") or None,
                "order_index": index,
                "created_at": now,
            }
            for index, question in enumerate(quiz_data["questions"], start=1)
        ]

        try:
            self.user_quizzes.insert_one(quiz)
        except Exception as e:
            logger.error(f"Error submitting community quiz: {e}")
            return None

        try:
            if questions:
                self.quiz_questions.insert_many(questions)
        except Exception as e:
            logger.error(f"Error submitting questions for quiz {quiz_id}, removing quiz: {e}")
            try:
                self.user_quizzes.delete_one({"id": quiz_id})
                self.quiz_questions.delete_many({"quiz_id": quiz_id})
            except Exception as cleanup_error:
                logger.error(f"Error removing incomplete quiz {quiz_id}: {cleanup_error}")
            return None

        logger.info(f"Submitted community quiz {quiz_id} with {len(questions)} questions")
        return quiz_id

    def increment_play_count(self, quiz_id: str) -> bool:
        try:
            result = self.user_quizzes.update_one({"id": quiz_id}, {"$inc": {"play_count": 1}})
            return result.modified_count > 0
        except Exception as e:
            logger.error(f"Error updating play count for {quiz_id}: {e}")
            return False

    def rate_community_quiz(self, quiz_id: str, rating: int) -> bool:
        try:
            result = self.user_quizzes.update_one(
                {"id": quiz_id, "status": "approved"},
                {"$inc": {"rating_sum": rating, "rating_count": 1}}
            )
            return result.modified_count > 0
        except Exception as e:
            logger.error(f"Error rating quiz {quiz_id}: {e}")
            return False

    # Moderation

    def get_pending_questions(self) -> List[Dict[str, Any]]:
        try:
            return list(self.questions.aggregate(self._question_pipeline({"status": "pending"})))
        except Exception as e:
            logger.error(f"Error fetching pending questions: {e}")
            return []

    def get_pending_quizzes(self) -> List[Dict[str, Any]]:
        try:
            quizzes = self.user_quizzes.aggregate(self._quiz_pipeline({"status": "pending"}))
            return [self._with_rating(quiz) for quiz in quizzes]
        except Exception as e:
            logger.error(f"Error fetching pending quizzes: {e}")
            return []

    def _review(self, collection, document_id: str, status: str, reviewer_id: str, notes: Optional[str]) -> bool:
        now = datetime.now()
        result = collection.update_one(
            {"id": document_id},
            {"$set": {
                "status": status,
                "reviewed_by": reviewer_id,
                "reviewed_at": now,
                "review_notes": notes,
                "updated_at": now,
            }}
        )
        return result.matched_count > 0

    def review_question(self, question_id: str, status: str, reviewer_id: str, notes: Optional[str] = None) -> bool:
        try:
            reviewed = self._review(self.questions, question_id, status, reviewer_id, notes)
            logger.info(f"Question {question_id} marked {status} by {reviewer_id}")
            return reviewed
        except Exception as e:
            logger.error(f"Error reviewing question {question_id}: {e}")
            return False

    def review_quiz(self, quiz_id: str, status: str, reviewer_id: str, notes: Optional[str] = None) -> bool:
        try:
            reviewed = self._review(self.user_quizzes, quiz_id, status, reviewer_id, notes)
            logger.info(f"Quiz {quiz_id} marked {status} by {reviewer_id}")
            return reviewed
        except Exception as e:
            logger.error(f"Error reviewing quiz {quiz_id}: {e}")
            return False

    # Users

    def get_all_users(self) -> List[Dict[str, Any]]:
        try:
            return list(self.users.find({}, {"_id": 0}).sort("created_at", -1))
        except Exception as e:
            logger.error(f"Error fetching users: {e}")
            return []

    def update_user_privileges(self, user_id: str, is_privileged: bool, role: str) -> bool:
        try:
            result = self.users.update_one(
                {"id": user_id},
                {"$set": {
                    "is_privileged": is_privileged,
                    "role": role,
                    "updated_at": datetime.now(),
                }}
            )
            return result.matched_count > 0
        except Exception as e:
            logger.error(f"Error updating privileges for {user_id}: {e}")
            return False

    # Settings

    def get_settings_document(self, key: str) -> Optional[Dict[str, Any]]:
        return self.settings.find_one({"key": key}, {"_id": 0, "key": 0, "updated_at": 0})

    def save_settings_document(self, key: str, document: Dict[str, Any]) -> bool:
        self.settings.update_one(
            {"key": key},
            {"$set": {**document, "updated_at": datetime.now()}},
            upsert=True
        )
        logger.info(f"Saved settings document: {key}")
        return True
