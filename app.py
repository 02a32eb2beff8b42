# app.py
import random

import pandas as pd
import streamlit as st

from timetable.config import GeneratorConfig, ScheduleConstraints, load_config
from timetable.data_loader import existing_from_dataframe, load_frames, offerings_from_dataframe
from timetable.engine import TimetableGenerator
from timetable.evaluation import audit_schedule, occupancy_frame_data
from timetable.export import (
    assignments_to_dataframe,
    class_timetable_grid,
    faculty_timetable_grid,
    subject_legend,
    workloads_to_dataframe,
)
from timetable.grid import DAYS, TIME_SLOTS

# --- PAGE CONFIG ---
st.set_page_config(page_title="Weekly Timetable Generator", layout="wide", initial_sidebar_state="expanded")

# --- STYLES ---
st.markdown("""
    <style>
    .stButton>button {
        width: 100%;
        background-color: #1e40af;
        color: white;
        font-weight: bold;
        height: 50px;
    }
    .dark-info-box {
        background-color: #1e1e1e;
        border: 1px solid #444;
        padding: 10px;
        font-family: 'Courier New', monospace;
        font-size: 12px;
        color: #eee;
        max-height: 400px;
        overflow-y: auto;
    }
    </style>
""", unsafe_allow_html=True)


# --- HELPERS ---
def constraint_controls(defaults: ScheduleConstraints) -> ScheduleConstraints:
    st.subheader("Constraints")
    return ScheduleConstraints(
        max_theory_per_faculty_per_day=st.slider("Max theory / faculty / day", 0, 7, defaults.max_theory_per_faculty_per_day),
        max_continuous_theory=st.slider("Max continuous theory", 0, 7, defaults.max_continuous_theory),
        min_free_periods_per_faculty_per_day=st.slider("Min free periods / day", 0, 7, defaults.min_free_periods_per_faculty_per_day),
        max_periods_per_subject_per_day=st.slider("Max periods same subject / day", 0, 7, defaults.max_periods_per_subject_per_day),
        prefer_labs_in_afternoon=st.checkbox("Prefer labs in afternoon", defaults.prefer_labs_in_afternoon),
        avoid_theory_around_labs=st.checkbox("Avoid theory next to labs", defaults.avoid_theory_around_labs),
        distribute_workload_evenly=st.checkbox("Distribute workload evenly", defaults.distribute_workload_evenly),
        core_subjects_in_morning=st.checkbox("Core subjects in morning", defaults.core_subjects_in_morning),
        light_subjects_on_light_days=st.checkbox("Light subjects on light days", defaults.light_subjects_on_light_days),
    )


def names_or_id(result, teacher_id):
    for wl in result.workloads:
        if wl.teacher_id == teacher_id:
            return wl.teacher_name
    return teacher_id


def style_occupancy(df):
    """0 = free, 1 = green, >1 = red clash."""
    def highlight(val):
        if val == 1:
            return "background-color: #90ee90; color: black; font-weight: bold;"
        if val > 1:
            return "background-color: #ff4b4b; color: white; font-weight: bold;"
        return "color: #333;"
    return df.style.map(highlight)


# --- MAIN APP ---
def main():
    if "config" not in st.session_state:
        st.session_state.config = load_config("config.yaml")
    if "frames" not in st.session_state:
        st.session_state.frames = load_frames("data")
    if "result" not in st.session_state:
        st.session_state.result = None
    cfg: GeneratorConfig = st.session_state.config

    with st.sidebar:
        st.title("🗓️ Timetable")
        page = st.radio("Go to:", [
            "Generate",
            "Class Timetable",
            "Faculty Timetables",
            "Justification",
            "Occupancy Matrices",
        ])
        st.markdown("---")
        constraints = constraint_controls(cfg.constraints)
        seed = st.number_input("Seed", value=int(cfg.seed or 0), step=1)

    result = st.session_state.result

    # 1. GENERATE
    if page == "Generate":
        st.header("📋 Offerings and Existing Timetable")
        offers_df, existing_df = st.session_state.frames
        tabs = st.tabs(["Offerings", "Existing timetable"])
        with tabs[0]:
            edited_offers = st.data_editor(offers_df, num_rows="dynamic", key="editor_offers", use_container_width=True)
        with tabs[1]:
            edited_existing = st.data_editor(existing_df, num_rows="dynamic", key="editor_existing", use_container_width=True)

        if st.button("🚀 Generate Timetable"):
            try:
                offerings = offerings_from_dataframe(edited_offers.dropna(subset=["id", "teacher_id"]))
                existing = existing_from_dataframe(edited_existing)
            except ValueError as e:
                st.error(str(e))
            else:
                generator = TimetableGenerator(offerings, existing, constraints, cfg, random.Random(int(seed)))
                st.session_state.result = generator.generate()
                st.session_state.constraints = constraints
                st.session_state.frames = (edited_offers, edited_existing)
                st.rerun()

        if result is not None:
            st.divider()
            c1, c2, c3 = st.columns(3)
            c1.metric("Assignments", len(result.assignments))
            c2.metric("Faculty", len(result.workloads))
            c3.metric("Missing sessions", sum(result.shortfalls.values()))
            st.dataframe(assignments_to_dataframe(result.assignments), use_container_width=True, height=400)

    elif result is None:
        st.warning("Generate a timetable in the 'Generate' section first.")

    # 2. CLASS TIMETABLE
    elif page == "Class Timetable":
        st.header("🏫 Class Timetable")
        st.dataframe(class_timetable_grid(result.assignments), use_container_width=True)
        st.subheader("Subjects")
        st.dataframe(subject_legend(result.assignments), use_container_width=True)

    # 3. FACULTY TIMETABLES
    elif page == "Faculty Timetables":
        st.header("👩‍🏫 Faculty Timetables")
        st.dataframe(workloads_to_dataframe(result.workloads), use_container_width=True)
        by_id = {wl.teacher_id: wl for wl in result.workloads}
        if by_id:
            sel = st.selectbox("Faculty:", options=list(by_id), format_func=lambda t: by_id[t].teacher_name)
            wl = by_id[sel]
            st.caption(
                f"Total Periods: {wl.total_periods} | Morning: {wl.morning_periods} | "
                f"Afternoon: {wl.afternoon_periods} | Lightest day: {wl.lightest_day}"
            )
            st.dataframe(faculty_timetable_grid(wl), use_container_width=True)

    # 4. JUSTIFICATION
    elif page == "Justification":
        st.header("🧾 Scheduling Justification")
        html = "<div class='dark-info-box'>" + "<br>".join(result.justification) + "</div>"
        st.markdown(html, unsafe_allow_html=True)

    # 5. OCCUPANCY MATRICES
    elif page == "Occupancy Matrices":
        st.header("⚠️ Occupancy Matrices")
        audit = audit_schedule(result.assignments, st.session_state.get("constraints", constraints))
        if audit.is_clean:
            st.success("No clashes or constraint violations found.")
        else:
            for v in audit.violations:
                st.error(v)

        kind = st.radio("Matrix:", ["By Room", "By Faculty"], horizontal=True)
        index = [s.label for s in TIME_SLOTS]
        if kind == "By Room" and audit.rooms:
            pos = st.selectbox("Room:", options=range(len(audit.rooms)), format_func=lambda i: audit.rooms[i])
            df = pd.DataFrame(occupancy_frame_data(audit.room_matrix, pos), index=index)
            st.dataframe(style_occupancy(df), height=350)
        elif kind == "By Faculty" and audit.teachers:
            pos = st.selectbox("Faculty:", options=range(len(audit.teachers)), format_func=lambda i: names_or_id(result, audit.teachers[i]))
            df = pd.DataFrame(occupancy_frame_data(audit.teacher_matrix, pos), index=index)
            st.dataframe(style_occupancy(df), height=350)

        busy = audit.teacher_matrix.sum(axis=2)
        if busy.size:
            st.subheader("Periods per faculty per day")
            st.dataframe(pd.DataFrame(busy, index=[names_or_id(result, t) for t in audit.teachers], columns=list(DAYS)))


if __name__ == "__main__":
    main()
