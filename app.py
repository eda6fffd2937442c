"""
Photo Clusters - Streamlit Web Application

Browse a folder photo library as:
- Moments: bursts of photo-taking separated by long pauses
- Places: visits to one location
- Screenshots

Cached results are shown straight away; the library is then re-indexed in
the background of the page and the view is refreshed.
"""

import streamlit as st
from datetime import datetime
from pathlib import Path
import pandas as pd
import plotly.express as px

from photo_clusters.config import load_settings
from photo_clusters.database import CacheStore
from photo_clusters.error_handling import setup_logging
from photo_clusters.formatting import format_moment_title, format_place_title, place_label
from photo_clusters.geocoding import NominatimGeocoder
from photo_clusters.library import PhotoLibrary, DEFAULT_MAX_TRAVEL_TIME_MINUTES
from photo_clusters.media_source import FolderMediaSource

# Page configuration
st.set_page_config(
    page_title="Photo Clusters",
    page_icon="📸",
    layout="wide",
    initial_sidebar_state="expanded"
)

settings = load_settings()

if 'synced' not in st.session_state:
    st.session_state.synced = False
if 'library_root' not in st.session_state:
    st.session_state.library_root = settings.library_root


def get_library(library_root: str) -> PhotoLibrary:
    """One PhotoLibrary per session and folder."""
    library = st.session_state.get('library')
    if library is None or str(library.source.root) != library_root:
        setup_logging(settings.log_level, settings.log_file)
        library = PhotoLibrary(
            FolderMediaSource(library_root),
            CacheStore(settings.db_path),
            geocoder=NominatimGeocoder(settings.geocoder_url, settings.user_agent),
        )
        st.session_state.library = library
        st.session_state.synced = False
    return library


def show_grid(library: PhotoLibrary, items, cols_per_row: int = 4):
    for i in range(0, len(items), cols_per_row):
        cols = st.columns(cols_per_row)
        for col, item in zip(cols, items[i:i + cols_per_row]):
            with col:
                path = library.source.root / item.id
                if path.exists():
                    st.image(str(path), use_container_width=True)
                else:
                    st.caption("Missing file")
                st.caption(Path(item.id).name)


def show_moments(library: PhotoLibrary):
    state = library.load_cached_moments()
    if not state.moments:
        st.info("No moments yet. If you just pointed at a library, wait for indexing.")
        return

    titles = {c.id: f"{format_moment_title(c, state.moments)} ({len(c.asset_ids)} photos)"
              for c in state.moments}
    selected = st.selectbox("Moment", list(titles), format_func=titles.get)

    found = library.get_moment(selected)
    if found:
        cluster, assets = found
        show_grid(library, assets)


def show_places(library: PhotoLibrary):
    state = library.load_cached_places()
    if not state.places:
        st.info("No places yet. Places need photos with GPS data.")
        return

    df_places = pd.DataFrame([{
        'Place': place_label(c),
        'Photos': len(c.asset_ids),
        'Start': datetime.fromtimestamp(c.start_ts / 1000),
        'End': datetime.fromtimestamp(c.end_ts / 1000),
        'Latitude': c.lat,
        'Longitude': c.lon,
    } for c in state.places])
    st.dataframe(df_places, use_container_width=True)

    st.subheader("📍 Place Map")
    fig = px.scatter_mapbox(
        df_places,
        lat='Latitude',
        lon='Longitude',
        hover_name='Place',
        hover_data=['Photos'],
        size='Photos',
        color='Photos',
        color_continuous_scale='Teal',
        zoom=3,
        height=400,
    )
    fig.update_layout(
        mapbox_style="open-street-map",
        margin={"r": 0, "t": 0, "l": 0, "b": 0}
    )
    st.plotly_chart(fig, use_container_width=True)

    titles = {c.id: format_place_title(c) for c in state.places}
    selected = st.selectbox("Place", list(titles), format_func=titles.get)
    found = library.get_place(selected)
    if found:
        cluster, assets = found
        show_grid(library, assets)


def show_screenshots(library: PhotoLibrary):
    screenshots = library.list_screenshots()
    st.write(f"Screenshots: {len(screenshots)}")
    if screenshots:
        show_grid(library, screenshots)
    else:
        st.info("No screenshots found yet.")


def main():
    st.title("📸 Photo Clusters")
    st.markdown("*Moments and places from your photo library*")
    st.markdown("---")

    with st.sidebar:
        st.header("⚙️ Configuration")
        library_root = st.text_input("Library folder", value=st.session_state.library_root)
        st.session_state.library_root = library_root

        st.subheader("🕒 Moments")
        session_gap = st.slider("Session gap (minutes)", min_value=5, max_value=240, value=60, step=5)

        st.subheader("🗺️ Places")
        max_travel = st.slider("Max travel time (minutes)", min_value=10, max_value=480,
                               value=DEFAULT_MAX_TRAVEL_TIME_MINUTES, step=10)

        include_screenshots = st.checkbox("Include screenshots", value=False)
        refresh_clicked = st.button("🔄 Refresh now", use_container_width=True)

    library = get_library(library_root)

    tab1, tab2, tab3 = st.tabs(["🕒 Moments", "🗺️ Places", "🖼️ Screenshots"])
    with tab1:
        show_moments(library)
    with tab2:
        show_places(library)
    with tab3:
        show_screenshots(library)

    last_sync = library.load_cached_moments().last_sync_ts
    if last_sync:
        st.caption(f"Last synced {datetime.fromtimestamp(last_sync / 1000):%Y-%m-%d %H:%M}")

    if refresh_clicked or not st.session_state.synced:
        with st.spinner("Indexing your library…"):
            library.refresh_moments(session_gap_minutes=session_gap,
                                    include_screenshots=include_screenshots)
            library.refresh_places(include_screenshots=include_screenshots,
                                   max_travel_time_minutes=max_travel)
        st.session_state.synced = True
        st.rerun()


if __name__ == "__main__":
    main()
